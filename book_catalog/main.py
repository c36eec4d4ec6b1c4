import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from book_catalog.config import settings
from book_catalog.crud.book import book_repository
from book_catalog.routes.graphql import graphql_router

# Настройка логирования
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Book Catalog GraphQL API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """
    Обработчик всех неожиданных исключений.

    Ошибки резолверов GraphQL сюда не попадают: Strawberry отдает их
    в массиве errors ответа.
    """
    logger.error(f"Неожиданная ошибка: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )


@app.on_event("startup")
async def startup_event():
    """Открывает HTTP сессию клиента DummyJSON при старте."""
    try:
        await book_repository.api_client.open()
        logger.info(f"GraphQL сервер готов: http://{settings.SERVER_HOST}:{settings.SERVER_PORT}/graphql")
    except Exception as e:
        logger.critical(f"Ошибка запуска приложения: {str(e)}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Закрывает HTTP сессию клиента DummyJSON."""
    await book_repository.api_client.close()


@app.get("/health")
async def health_check():
    return {"status": "ok"}


app.include_router(graphql_router, prefix="/graphql", tags=["graphql"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.SERVER_HOST, port=settings.SERVER_PORT)
