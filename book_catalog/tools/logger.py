# logging_config.py
import logging
import logging.handlers
from pathlib import Path

from book_catalog.config import settings

# Настройки логгера
LOG_FILE = "app.log"
LOG_LEVEL = logging.getLevelName(settings.LOG_LEVEL.upper())
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Создаем директорию для логов, если ее нет
Path(settings.LOG_DIR).mkdir(exist_ok=True)


def setup_logger(name: str) -> logging.Logger:
    """
    Настраивает и возвращает логгер с заданным именем.

    Повторный вызов с тем же именем не добавляет обработчики второй раз.

    Args:
        name (str): Имя логгера (обычно __name__)

    Returns:
        logging.Logger: Сконфигурированный логгер
    """
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    # Обработчик для записи в файл (ротация по 5 МБ)
    file_handler = logging.handlers.RotatingFileHandler(
        filename=f"{settings.LOG_DIR}/{LOG_FILE}",
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8"
    )
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger
