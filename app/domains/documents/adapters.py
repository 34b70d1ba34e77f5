"""Адаптеры внешних источников документов (INSEE, INPI, BODACC).

Адаптер только собирает запрос (build_request) и разбирает ответ
(parse_response). Сам HTTP-вызов выполняет UpstreamFetcher, который никогда
не выпускает исключение наружу: любая ошибка возвращается как
UpstreamResult.failure.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Protocol
from urllib.parse import quote

import httpx

from app.core.config import Settings
from app.core.errors import ErrorKind, GatewayError
from app.domains.documents.entities import DocumentRequest, DocumentType, UpstreamRequest, UpstreamResult
from app.domains.documents.identifiers import derive_default_siret, format_siret_spaced

_logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

PDF_CONTENT_TYPE = "application/pdf"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
BODACC_RECORDS_LIMIT = 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def serialize_json(data) -> str:
    """Детерминированная сериализация: отступ 2, порядок ключей сохраняется"""
    return json.dumps(data, indent=2, ensure_ascii=False)


class SourceAdapter(Protocol):
    name: str

    def preflight(self, request: DocumentRequest) -> Optional[UpstreamResult]:
        ...

    def build_request(self, request: DocumentRequest) -> UpstreamRequest:
        ...

    def parse_response(self, request: DocumentRequest, response: httpx.Response) -> UpstreamResult:
        ...


class InseeAdapter:
    """Avis de situation SIRENE в PDF"""

    name = "INSEE"

    def __init__(self, settings: Settings, clock: Clock = utc_now):
        self.settings = settings
        self.clock = clock

    def preflight(self, request: DocumentRequest) -> Optional[UpstreamResult]:
        return None

    def target_siret(self, request: DocumentRequest) -> str:
        return request.siret or derive_default_siret(request.siren)

    def build_request(self, request: DocumentRequest) -> UpstreamRequest:
        siret = self.target_siret(request)
        segment = format_siret_spaced(siret) if self.settings.insee_use_spaced_siret else siret
        base = self.settings.insee_pdf_base_url.rstrip("/")

        return UpstreamRequest(
            url=f"{base}/identification/pdf/{quote(segment)}",
            headers={"Accept": PDF_CONTENT_TYPE, "User-Agent": self.settings.user_agent},
        )

    def parse_response(self, request: DocumentRequest, response: httpx.Response) -> UpstreamResult:
        siret = self.target_siret(request)
        return UpstreamResult.ok(
            payload=response.content,
            content_type=PDF_CONTENT_TYPE,
            file_name=f"INSEE_Avis_Situation_{request.siren}_{siret}.pdf",
            fetched_at=self.clock(),
        )


class InpiAdapter:
    """Выписка RNE в PDF из data.inpi.fr"""

    name = "INPI"

    def __init__(self, settings: Settings, clock: Clock = utc_now):
        self.settings = settings
        self.clock = clock

    def preflight(self, request: DocumentRequest) -> Optional[UpstreamResult]:
        # Без токена запрос не отправляется вовсе
        if not self.settings.inpi_api_token:
            return UpstreamResult.failure(ErrorKind.SERVICE_NOT_CONFIGURED, "INPI API token not available")
        return None

    def build_request(self, request: DocumentRequest) -> UpstreamRequest:
        base = self.settings.inpi_base_url.rstrip("/")
        # ids передается как JSON-массив прямо в строке запроса: так требует API
        url = f"{base}/export/companies?format=pdf&ids=[%22{request.siren}%22]&est=all"

        return UpstreamRequest(
            url=url,
            headers={
                "Authorization": f"Bearer {self.settings.inpi_api_token}",
                "User-Agent": self.settings.user_agent,
            },
        )

    def parse_response(self, request: DocumentRequest, response: httpx.Response) -> UpstreamResult:
        return UpstreamResult.ok(
            payload=response.content,
            content_type=response.headers.get("content-type") or PDF_CONTENT_TYPE,
            file_name=f"INPI_RNE_{request.siren}.pdf",
            fetched_at=self.clock(),
        )


class BodaccAdapter:
    """Публикации BODACC в JSON (открытые данные, без авторизации)"""

    name = "BODACC"

    def __init__(self, settings: Settings, clock: Clock = utc_now):
        self.settings = settings
        self.clock = clock

    def preflight(self, request: DocumentRequest) -> Optional[UpstreamResult]:
        return None

    def build_request(self, request: DocumentRequest) -> UpstreamRequest:
        base = self.settings.bodacc_base_url.rstrip("/")
        return UpstreamRequest(
            url=f"{base}/api/v2/catalog/datasets/annonces-commerciales/records",
            headers={"User-Agent": self.settings.user_agent},
            params={"where": f'registre like "{request.siren}%"', "limit": BODACC_RECORDS_LIMIT},
        )

    def parse_response(self, request: DocumentRequest, response: httpx.Response) -> UpstreamResult:
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("BODACC payload is not an object")

        # Записи сверх лимита не догружаются
        formatted = {
            "siren": request.siren,
            "total_count": data.get("total_count") or 0,
            "download_date": self.clock().isoformat(),
            "records": data.get("records") or [],
        }

        return UpstreamResult.ok(
            payload=serialize_json(formatted),
            content_type=JSON_CONTENT_TYPE,
            file_name=f"BODACC_Data_{request.siren}.json",
            fetched_at=self.clock(),
        )


ADAPTER_CLASSES = {
    DocumentType.INSEE: InseeAdapter,
    DocumentType.INPI: InpiAdapter,
    DocumentType.BODACC: BodaccAdapter,
}


def build_adapter_registry(settings: Settings, clock: Clock = utc_now) -> Dict[DocumentType, SourceAdapter]:
    """Реестр адаптеров по типу документа"""
    return {
        document_type: adapter_class(settings, clock=clock)
        for document_type, adapter_class in ADAPTER_CLASSES.items()
    }


class UpstreamFetcher:
    """Выполняет ровно один запрос через адаптер; без повторов"""

    def __init__(self, client: httpx.AsyncClient, settings: Settings, logger: Optional[logging.Logger] = None):
        self.client = client
        self.settings = settings
        self.logger = logger or _logger

    def _status_failure(self, adapter: SourceAdapter, response: httpx.Response) -> UpstreamResult:
        # Тело ответа не передаем: только статус и reason phrase
        message = f"{adapter.name} API error: {response.status_code} {response.reason_phrase}".rstrip()
        return UpstreamResult.failure(ErrorKind.UPSTREAM_UNAVAILABLE, message, http_status=response.status_code)

    async def fetch(self, adapter: SourceAdapter, request: DocumentRequest) -> UpstreamResult:
        rejected = adapter.preflight(request)
        if rejected is not None:
            self.logger.warning(
                f"{adapter.name} request rejected before upstream call",
                extra={"siren": request.siren, "error_kind": rejected.error_kind.value},
            )
            return rejected

        try:
            upstream = adapter.build_request(request)
        except GatewayError as e:
            return UpstreamResult.failure(e.kind, e.message)

        self.logger.info(
            f"Downloading {adapter.name} document",
            extra={"siren": request.siren, "siret": request.siret, "url": upstream.url},
        )

        try:
            response = await self.client.get(
                upstream.url,
                headers=upstream.headers,
                params=upstream.params,
                timeout=self.settings.upstream_timeout_seconds,
            )
        except httpx.HTTPError as e:
            self.logger.error(
                f"{adapter.name} upstream request failed: {type(e).__name__}",
                extra={"siren": request.siren, "url": upstream.url},
            )
            return UpstreamResult.failure(
                ErrorKind.UPSTREAM_UNAVAILABLE,
                f"{adapter.name} service unavailable: {type(e).__name__}",
            )

        if not response.is_success:
            self.logger.warning(
                f"{adapter.name} upstream returned an error status",
                extra={"siren": request.siren, "http_status": response.status_code},
            )
            return self._status_failure(adapter, response)

        try:
            result = adapter.parse_response(request, response)
        except ValueError as e:
            self.logger.error(
                f"{adapter.name} response could not be parsed: {e}",
                extra={"siren": request.siren},
            )
            return UpstreamResult.failure(
                ErrorKind.UPSTREAM_UNAVAILABLE,
                f"{adapter.name} returned an unreadable response",
            )

        self.logger.info(
            f"{adapter.name} document downloaded",
            extra={"siren": request.siren, "size_bytes": result.size_bytes},
        )
        return result
