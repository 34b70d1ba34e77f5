from app.api.http.health import router as health_router
from app.api.http.documents import router as documents_router
from app.api.http.companies import router as companies_router
from app.api.http.files import router as files_router

__all__ = [
    "health_router",
    "documents_router",
    "companies_router",
    "files_router"
]
