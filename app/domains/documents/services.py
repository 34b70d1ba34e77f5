import logging
from typing import Optional

import httpx

from app.core.config import Settings
from app.core.errors import GatewayError, InvalidIdentifier
from app.domains.documents.adapters import Clock, UpstreamFetcher, build_adapter_registry, utc_now
from app.domains.documents.entities import DocumentRequest, DocumentType, UpstreamResult
from app.domains.documents.identifiers import (
    clean_identifier, validate_siren, validate_siret, siret_matches_siren
)
from app.domains.documents.normalizer import NormalizedResponse, normalize

_logger = logging.getLogger(__name__)


class DocumentGatewayService:
    """Сервис скачивания документов из государственных API"""

    def __init__(
        self,
        client: httpx.AsyncClient,
        settings: Settings,
        clock: Clock = utc_now,
        logger: Optional[logging.Logger] = None
    ):
        self.settings = settings
        self.logger = logger or _logger
        self.adapters = build_adapter_registry(settings, clock=clock)
        self.fetcher = UpstreamFetcher(client, settings, logger=self.logger)

    def parse_request(self, document_type: str, siren: str, siret: Optional[str] = None) -> DocumentRequest:
        """Проверка параметров до любого сетевого вызова"""
        try:
            doc_type = DocumentType(document_type.lower())
        except ValueError:
            supported = ", ".join(DocumentType.supported())
            raise InvalidIdentifier(f"Unsupported document type: {document_type!r} (supported: {supported})")

        if not validate_siren(siren):
            raise InvalidIdentifier(f"SIREN must be exactly 9 digits: {siren!r}")

        clean_siret = None
        if siret:
            clean_siret = clean_identifier(siret)
            if not validate_siret(clean_siret):
                raise InvalidIdentifier(f"Invalid SIRET format: {clean_siret!r}")
            if self.settings.strict_siret_match and not siret_matches_siren(clean_siret, siren):
                raise InvalidIdentifier(f"SIRET {clean_siret} does not belong to SIREN {siren}")

        return DocumentRequest(document_type=doc_type, siren=siren, siret=clean_siret)

    async def fetch(self, request: DocumentRequest) -> UpstreamResult:
        """Обращение к источнику, соответствующему типу документа"""
        adapter = self.adapters[request.document_type]
        return await self.fetcher.fetch(adapter, request)

    async def download(self, document_type: str, siren: str, siret: Optional[str] = None) -> NormalizedResponse:
        """Скачивание документа: проверка, запрос, нормализация ответа"""
        self.logger.info(
            "Download request",
            extra={"document_type": document_type, "siren": siren, "siret": siret},
        )

        try:
            request = self.parse_request(document_type, siren, siret)
        except GatewayError as e:
            self.logger.warning(
                f"Download request rejected: {e.message}",
                extra={"document_type": document_type, "siren": siren, "error_kind": e.kind.value},
            )
            return normalize(UpstreamResult.failure(e.kind, e.message), None, debug=self.settings.debug)

        result = await self.fetch(request)
        return normalize(result, request.document_type, debug=self.settings.debug)
