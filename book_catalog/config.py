import os
from typing import List

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Настройки приложения, собранные из переменных окружения."""

    APP_ENV: str = os.getenv("APP_ENV", "dev")

    # REST источник данных
    DUMMY_BASE_URL: str = os.getenv("DUMMY_BASE_URL", "https://dummyjson.com")
    FETCH_LIMIT: int = int(os.getenv("FETCH_LIMIT", "100"))
    DEFAULT_LIMIT: int = int(os.getenv("DEFAULT_LIMIT", "20"))

    # GraphQL сервер
    SERVER_HOST: str = os.getenv("SERVER_HOST", "0.0.0.0")
    SERVER_PORT: int = int(os.getenv("SERVER_PORT", "4000"))
    GRAPHQL_DEV_URL: str = os.getenv("GRAPHQL_DEV_URL", "http://localhost:4000/graphql")
    GRAPHQL_PROD_URL: str = os.getenv("GRAPHQL_PROD_URL", "http://localhost:4000/graphql")
    CORS_ORIGINS: List[str] = [
        origin.strip()
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
        if origin.strip()
    ]

    # Клиент
    PAGE_SIZE: int = int(os.getenv("PAGE_SIZE", "10"))
    SEARCH_DEBOUNCE_SECONDS: float = float(os.getenv("SEARCH_DEBOUNCE_SECONDS", "0.3"))

    # Логирование
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: str = os.getenv("LOG_DIR", "logs")

    @property
    def graphql_endpoint(self) -> str:
        """Адрес GraphQL сервера в зависимости от окружения (dev/prod)."""
        if self.APP_ENV == "prod":
            return self.GRAPHQL_PROD_URL
        return self.GRAPHQL_DEV_URL


settings = Settings()
