import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.core.config import settings
from app.core.errors import ErrorKind, GatewayError, REDACTED_MESSAGE
from app.core.logging import configure_logging
from app.api.http.health import router as health_router
from app.api.http.documents import router as documents_router
from app.api.http.companies import router as companies_router
from app.api.http.files import router as files_router

configure_logging(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Registry Documents Gateway",
    description="Поиск компаний и скачивание документов INSEE, INPI, BODACC",
    version=__version__
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В продакшене указать конкретные домены
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


@app.exception_handler(GatewayError)
async def handle_gateway_error(request: Request, exc: GatewayError):
    """Ошибки приложения -> {error, message} с нужным статусом"""
    log = logger.error if exc.http_status >= 500 else logger.warning
    log(
        f"{exc.kind.value}: {exc.message}",
        extra={"path": request.url.path, "http_status": exc.http_status, "error_kind": exc.kind.value},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict(debug=settings.debug))


@app.exception_handler(Exception)
async def handle_unknown_error(request: Request, exc: Exception):
    """Непредвиденные ошибки -> 500 без деталей (кроме режима отладки)"""
    logger.error(
        "Unhandled error",
        extra={"path": request.url.path, "http_status": 500, "error_kind": ErrorKind.INTERNAL_FAULT.value},
        exc_info=exc,
    )
    message = str(exc) if settings.debug else REDACTED_MESSAGE
    return JSONResponse(status_code=500, content={"error": ErrorKind.INTERNAL_FAULT.value, "message": message})


# Подключаем роутеры
app.include_router(health_router)
app.include_router(documents_router)
app.include_router(companies_router)
app.include_router(files_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "Registry Documents Gateway API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }
