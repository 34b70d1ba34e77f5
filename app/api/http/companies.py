from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import httpx

from app.core.config import Settings, get_settings
from app.core.db import get_db
from app.domains.companies.schemas import CompanyResponse, CompanySearchResponse
from app.domains.companies.services import CompanyService
from app.domains.documents.schemas import DocumentResponse, ErrorResponse
from app.infrastructure.clients.registry_client import RegistryClient
from app.infrastructure.http import get_http_client

router = APIRouter(prefix="/api/companies", tags=["companies"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def get_company_service(
    db: AsyncSession = Depends(get_db),
    client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings)
) -> CompanyService:
    return CompanyService(db, RegistryClient(client, settings))


@router.get("/search", response_model=CompanySearchResponse, responses={400: {"model": ErrorResponse}})
async def search_companies(
    q: Optional[str] = Query(None, description="SIREN, наименование или вид деятельности (от 3 символов)"),
    company_service: CompanyService = Depends(get_company_service)
):
    """Поиск компаний в локальной базе и в SIRENE"""
    return await company_service.search(q)


@router.get("/{siren}", response_model=CompanyResponse, responses=ERROR_RESPONSES)
async def get_company(
    siren: str,
    company_service: CompanyService = Depends(get_company_service)
):
    """Карточка компании: локальные данные, SIRENE, BODACC, показатели"""
    return await company_service.get_company_details(siren)


@router.get("/{siren}/documents", response_model=List[DocumentResponse], responses=ERROR_RESPONSES)
async def get_company_documents(
    siren: str,
    company_service: CompanyService = Depends(get_company_service)
):
    """Документы компании (при первом обращении загружаются из BODACC)"""
    documents = await company_service.get_documents(siren)

    return [
        DocumentResponse(
            id=doc.id,
            date_publication=doc.date_publication,
            type_document=doc.type_document,
            source=doc.source,
            type_avis=doc.type_avis,
            reference=doc.reference,
            description=doc.description,
            contenu=doc.contenu,
            lien_document=doc.lien_document
        )
        for doc in documents
    ]
