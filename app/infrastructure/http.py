from typing import AsyncIterator, Optional

import httpx
from fastapi import Depends

from app.core.config import Settings, get_settings


def create_http_client(settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """HTTP-клиент для внешних API с явным таймаутом"""
    return httpx.AsyncClient(
        timeout=settings.upstream_timeout_seconds,
        transport=transport,
        follow_redirects=True,
    )


# Функция для dependency injection в FastAPI: клиент живет в пределах запроса
async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:
    async with create_http_client(settings) as client:
        yield client
