from fastapi import APIRouter

from app import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    """Проверка работоспособности сервиса"""
    return {"status": "ok", "version": __version__}
