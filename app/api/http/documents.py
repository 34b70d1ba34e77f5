from fastapi import APIRouter, Depends, Query, Response
from typing import Optional
import httpx

from app.core.config import Settings, get_settings
from app.domains.documents.schemas import ErrorResponse
from app.domains.documents.services import DocumentGatewayService
from app.infrastructure.http import get_http_client

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.get(
    "/download/{document_type}/{siren}",
    responses={status: {"model": ErrorResponse} for status in (400, 502, 503)}
)
async def download_document(
    document_type: str,
    siren: str,
    siret: Optional[str] = Query(None, description="SIRET заведения (только для INSEE)"),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings)
):
    """Скачивание документа компании (INSEE, INPI, BODACC)"""
    service = DocumentGatewayService(client, settings)
    normalized = await service.download(document_type, siren, siret)

    return Response(
        content=normalized.body,
        status_code=normalized.status_code,
        headers=normalized.headers
    )
