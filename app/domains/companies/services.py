import logging
from dataclasses import asdict
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidIdentifier, NotFound, ServiceNotConfigured, UpstreamUnavailable
from app.db.models.document import DocumentSource
from app.db.repositories.company_repository import CompanyRepository
from app.db.repositories.document_repository import DocumentRepository
from app.domains.companies.entities import Company, Publication
from app.domains.companies.schemas import (
    CompanyResponse, CompanySearchResponse, CompanySummaryResponse, FinancialRatioResponse, PublicationResponse
)
from app.domains.documents.entities import Document
from app.domains.documents.identifiers import validate_siren
from app.domains.documents.mirror import DocumentMirror
from app.infrastructure.clients.registry_client import RegistryClient, parse_date

_logger = logging.getLogger(__name__)

LOCAL_DOCUMENTS_LIMIT = 10
PUBLICATIONS_LIMIT = 5
FINANCIAL_RATIOS_LIMIT = 3
SEARCH_MIN_QUERY_LENGTH = 3
SEARCH_LOCAL_ENOUGH = 5
SEARCH_RESULTS_LIMIT = 20
BODACC_DOCUMENT_TYPE = "Publication BODACC"


def publication_to_document(publication: Publication) -> Optional[Document]:
    """Публикация BODACC -> строка зеркала; без даты публикация пропускается"""
    date_publication = parse_date(publication.date_publication)
    if date_publication is None:
        return None

    return Document(
        date_publication=date_publication,
        type_document=BODACC_DOCUMENT_TYPE,
        source=DocumentSource.BODACC,
        type_avis=publication.type_annonce,
        reference=publication.reference,
        description=publication.description or BODACC_DOCUMENT_TYPE,
        contenu=publication.texte,
        lien_document=publication.lien_document,
    )


class CompanyService:
    """Сервис карточки компании: локальные данные + внешние реестры"""

    def __init__(self, session: AsyncSession, registry: RegistryClient, logger: Optional[logging.Logger] = None):
        self.session = session
        self.registry = registry
        self.logger = logger or _logger
        self.company_repository = CompanyRepository(session)
        self.document_repository = DocumentRepository(session)
        self.mirror = DocumentMirror(session, logger=self.logger)

    def _check_siren(self, siren: str) -> None:
        if not validate_siren(siren):
            raise InvalidIdentifier(f"SIREN must be exactly 9 digits: {siren!r}")

    async def get_or_fetch_company(self, siren: str) -> Company:
        """Компания из локальной базы, при промахе - из SIRENE с сохранением"""
        self._check_siren(siren)

        company = await self.company_repository.get_by_siren(siren)
        if company:
            return company

        upstream = await self.registry.get_company_by_siren(siren)
        if upstream is None:
            raise NotFound(f"Company {siren} not found")

        self.logger.info("Company fetched from SIRENE", extra={"siren": siren, "source": "SIRENE"})
        return await self.company_repository.create(upstream)

    async def get_company_details(self, siren: str) -> CompanyResponse:
        """Карточка компании с публикациями и финансовыми показателями"""
        company = await self.get_or_fetch_company(siren)

        documents = await self.document_repository.get_by_siren(siren, limit=LOCAL_DOCUMENTS_LIMIT)
        stored_ratios = await self.company_repository.get_financial_ratios(company.id)

        # Обогащение best-effort: сбой источника дает пустой список, а не ошибку
        try:
            publications = [
                PublicationResponse.model_validate(asdict(publication))
                for publication in (await self.registry.get_bodacc_publications(siren))[:PUBLICATIONS_LIMIT]
            ]
        except (UpstreamUnavailable, ValidationError) as e:
            self.logger.warning(f"BODACC fetch failed: {e}", extra={"siren": siren, "source": "BODACC"})
            publications = []

        try:
            ratios = [
                FinancialRatioResponse.model_validate(ratio)
                for ratio in (await self.registry.get_financial_ratios(siren))[:FINANCIAL_RATIOS_LIMIT]
            ]
        except (UpstreamUnavailable, ValidationError) as e:
            self.logger.warning(f"Financial ratios fetch failed: {e}", extra={"siren": siren})
            ratios = []

        return CompanyResponse(
            id=company.id,
            siren=company.siren,
            denomination=company.denomination,
            forme_juridique=company.forme_juridique,
            adresse_siege=company.adresse_siege,
            code_ape=company.code_ape,
            libelle_ape=company.libelle_ape,
            date_creation=company.date_creation,
            active=company.active,
            capital_social=company.capital_social,
            documents=[asdict(doc) for doc in documents],
            stored_ratios=[asdict(ratio) for ratio in stored_ratios],
            publications=publications,
            financial_ratios=ratios,
        )

    async def get_documents(self, siren: str) -> List[Document]:
        """Документы компании; при первом обращении подгружаются из BODACC"""
        self._check_siren(siren)

        cached = await self.mirror.get(siren)
        if cached:
            return cached

        company = await self.company_repository.get_by_siren(siren)
        if company is None:
            raise NotFound(f"Company {siren} not found")

        try:
            publications = await self.registry.get_bodacc_publications(siren)
        except UpstreamUnavailable as e:
            self.logger.error(f"Error fetching documents from BODACC: {e.message}", extra={"siren": siren})
            return []

        documents = [doc for doc in map(publication_to_document, publications) if doc is not None]
        if not documents:
            return []

        await self.mirror.put(siren, documents)
        return await self.mirror.get(siren) or []

    async def search(self, query: Optional[str]) -> CompanySearchResponse:
        """Поиск компаний: сначала локальная база, затем SIRENE"""
        query = (query or "").strip()
        if len(query) < SEARCH_MIN_QUERY_LENGTH:
            raise InvalidIdentifier(f"Query must be at least {SEARCH_MIN_QUERY_LENGTH} characters")

        local = await self.company_repository.search(query, limit=SEARCH_RESULTS_LIMIT)
        if len(local) >= SEARCH_LOCAL_ENOUGH:
            return CompanySearchResponse(
                results=[CompanySummaryResponse.model_validate(company) for company in local],
                source="local",
                total=len(local),
            )

        try:
            external = await self.registry.search_sirene(query, limit=SEARCH_RESULTS_LIMIT)
        except (UpstreamUnavailable, ServiceNotConfigured) as e:
            self.logger.warning(f"SIRENE search failed: {e}", extra={"source": "SIRENE"})
            external = []

        stored = await self._store_search_results(external)

        # Локальные результаты первыми, затем новые SIREN из SIRENE
        merged = list(local)
        seen = {company.siren for company in local}
        for company in external:
            if company.siren not in seen:
                seen.add(company.siren)
                merged.append(stored.get(company.siren, company))

        return CompanySearchResponse(
            results=[CompanySummaryResponse.model_validate(company) for company in merged[:SEARCH_RESULTS_LIMIT]],
            source="mixed",
            total=len(merged),
        )

    async def _store_search_results(self, companies: List[Company]) -> dict:
        """Сохранение найденных в SIRENE компаний; SIREN -> сохраненная запись"""
        if not companies:
            return {}

        try:
            await self.company_repository.upsert_many(companies)
        except SQLAlchemyError as e:
            await self.session.rollback()
            self.logger.error(f"Failed to save search results: {type(e).__name__}", extra={"source": "SIRENE"})
            return {}

        saved = await self.company_repository.get_by_sirens([company.siren for company in companies])
        return {company.siren: company for company in saved}
