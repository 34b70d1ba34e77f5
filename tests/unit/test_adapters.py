import json

import httpx

from app.core.errors import ErrorKind
from app.domains.documents.adapters import (
    BODACC_RECORDS_LIMIT,
    BodaccAdapter,
    InpiAdapter,
    InseeAdapter,
    UpstreamFetcher,
    build_adapter_registry,
)
from app.domains.documents.entities import DocumentRequest, DocumentType

SIREN = "552032534"


class RecordingTransport:
    """MockTransport с журналом полученных запросов"""

    def __init__(self, handler):
        self.requests = []
        self.handler = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


def make_fetcher(settings, handler):
    recorder = RecordingTransport(handler)
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return UpstreamFetcher(client, settings), recorder


def pdf_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, content=b"%PDF-1.4 test", headers={"content-type": "application/pdf"})


def test_registry_has_one_adapter_per_type(settings, fixed_clock) -> None:
    registry = build_adapter_registry(settings, clock=fixed_clock)

    assert set(registry) == {DocumentType.INSEE, DocumentType.INPI, DocumentType.BODACC}
    assert isinstance(registry[DocumentType.INSEE], InseeAdapter)


class TestInseeAdapter:
    async def test_requests_spaced_siret_with_pdf_headers(self, settings, fixed_clock) -> None:
        fetcher, recorder = make_fetcher(settings, pdf_response)
        adapter = InseeAdapter(settings, clock=fixed_clock)

        result = await fetcher.fetch(adapter, DocumentRequest(DocumentType.INSEE, SIREN))

        assert result.success is True
        assert result.payload == b"%PDF-1.4 test"
        assert result.content_type == "application/pdf"
        assert result.file_name == "INSEE_Avis_Situation_552032534_55203253400001.pdf"
        assert result.size_bytes == len(b"%PDF-1.4 test")

        request = recorder.requests[0]
        assert request.url.path == "/identification/pdf/552 032 534 00001"
        assert request.headers["Accept"] == "application/pdf"
        assert request.headers["User-Agent"] == settings.user_agent

    async def test_explicit_siret_is_used(self, settings, fixed_clock) -> None:
        fetcher, recorder = make_fetcher(settings, pdf_response)
        adapter = InseeAdapter(settings, clock=fixed_clock)

        result = await fetcher.fetch(adapter, DocumentRequest(DocumentType.INSEE, SIREN, "55203253400027"))

        assert result.file_name == "INSEE_Avis_Situation_552032534_55203253400027.pdf"
        assert recorder.requests[0].url.path.endswith("552 032 534 00027")

    async def test_plain_siret_when_spacing_disabled(self, settings, fixed_clock) -> None:
        settings.insee_use_spaced_siret = False
        fetcher, recorder = make_fetcher(settings, pdf_response)

        await fetcher.fetch(InseeAdapter(settings, clock=fixed_clock), DocumentRequest(DocumentType.INSEE, SIREN))

        assert recorder.requests[0].url.path == "/identification/pdf/55203253400001"

    async def test_error_status_is_reported_without_body(self, settings) -> None:
        def handler(request):
            return httpx.Response(500, text="stack trace with secrets")

        fetcher, _ = make_fetcher(settings, handler)
        result = await fetcher.fetch(InseeAdapter(settings), DocumentRequest(DocumentType.INSEE, SIREN))

        assert result.success is False
        assert result.error_kind is ErrorKind.UPSTREAM_UNAVAILABLE
        assert result.http_status == 500
        assert result.error_message == "INSEE API error: 500 Internal Server Error"
        assert "secrets" not in result.error_message

    async def test_network_error_becomes_failure(self, settings) -> None:
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        fetcher, _ = make_fetcher(settings, handler)
        result = await fetcher.fetch(InseeAdapter(settings), DocumentRequest(DocumentType.INSEE, SIREN))

        assert result.success is False
        assert result.error_kind is ErrorKind.UPSTREAM_UNAVAILABLE
        assert result.http_status is None

    async def test_timeout_becomes_failure(self, settings) -> None:
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        fetcher, _ = make_fetcher(settings, handler)
        result = await fetcher.fetch(InseeAdapter(settings), DocumentRequest(DocumentType.INSEE, SIREN))

        assert result.error_kind is ErrorKind.UPSTREAM_UNAVAILABLE
        assert "ReadTimeout" in result.error_message


class TestInpiAdapter:
    async def test_missing_token_skips_network(self, settings) -> None:
        settings.inpi_api_token = ""
        fetcher, recorder = make_fetcher(settings, pdf_response)

        result = await fetcher.fetch(InpiAdapter(settings), DocumentRequest(DocumentType.INPI, SIREN))

        assert result.success is False
        assert result.error_kind is ErrorKind.SERVICE_NOT_CONFIGURED
        assert recorder.requests == []

    async def test_sends_bearer_token_and_json_ids(self, settings, fixed_clock) -> None:
        fetcher, recorder = make_fetcher(settings, pdf_response)

        result = await fetcher.fetch(InpiAdapter(settings, clock=fixed_clock), DocumentRequest(DocumentType.INPI, SIREN))

        assert result.success is True
        assert result.file_name == "INPI_RNE_552032534.pdf"

        request = recorder.requests[0]
        assert request.headers["Authorization"] == "Bearer inpi-token"
        assert request.url.path == "/export/companies"
        assert request.url.params["ids"] == '["552032534"]'
        assert request.url.params["format"] == "pdf"
        assert request.url.params["est"] == "all"
        assert "%22552032534%22" in str(request.url)

    async def test_keeps_upstream_content_type(self, settings) -> None:
        def handler(request):
            return httpx.Response(200, content=b"%PDF", headers={"content-type": "application/octet-stream"})

        fetcher, _ = make_fetcher(settings, handler)
        result = await fetcher.fetch(InpiAdapter(settings), DocumentRequest(DocumentType.INPI, SIREN))

        assert result.content_type == "application/octet-stream"


class TestBodaccAdapter:
    RECORDS = {
        "total_count": 2,
        "records": [
            {"record": {"id": "a1", "fields": {"commercant": "Société Générale", "ville": "Paris"}}},
            {"record": {"id": "b2", "fields": {"commercant": "Société Générale", "ville": "Nîmes"}}},
        ],
    }

    def handler(self, request):
        return httpx.Response(200, json=self.RECORDS)

    async def test_queries_by_registry_prefix(self, settings, fixed_clock) -> None:
        fetcher, recorder = make_fetcher(settings, self.handler)

        await fetcher.fetch(BodaccAdapter(settings, clock=fixed_clock), DocumentRequest(DocumentType.BODACC, SIREN))

        request = recorder.requests[0]
        assert request.url.path == "/api/v2/catalog/datasets/annonces-commerciales/records"
        assert request.url.params["where"] == 'registre like "552032534%"'
        assert request.url.params["limit"] == str(BODACC_RECORDS_LIMIT)

    async def test_wraps_records_with_metadata(self, settings, fixed_clock) -> None:
        fetcher, _ = make_fetcher(settings, self.handler)

        result = await fetcher.fetch(BodaccAdapter(settings, clock=fixed_clock), DocumentRequest(DocumentType.BODACC, SIREN))

        assert result.success is True
        assert result.file_name == "BODACC_Data_552032534.json"
        assert result.content_type.startswith("application/json")

        data = json.loads(result.payload)
        assert list(data) == ["siren", "total_count", "download_date", "records"]
        assert data["siren"] == SIREN
        assert data["total_count"] == 2
        assert data["download_date"] == "2025-01-15T10:30:00+00:00"
        assert data["records"] == self.RECORDS["records"]

    async def test_output_is_deterministic_and_byte_counted(self, settings, fixed_clock) -> None:
        fetcher, _ = make_fetcher(settings, self.handler)
        adapter = BodaccAdapter(settings, clock=fixed_clock)
        request = DocumentRequest(DocumentType.BODACC, SIREN)

        first = await fetcher.fetch(adapter, request)
        second = await fetcher.fetch(adapter, request)

        assert first.payload == second.payload
        assert "Société" in first.payload
        assert '\n  "siren"' in first.payload
        assert first.size_bytes == len(first.payload.encode("utf-8"))
        assert first.size_bytes > len(first.payload)

    async def test_missing_fields_default_to_empty(self, settings, fixed_clock) -> None:
        def handler(request):
            return httpx.Response(200, json={})

        fetcher, _ = make_fetcher(settings, handler)
        result = await fetcher.fetch(BodaccAdapter(settings, clock=fixed_clock), DocumentRequest(DocumentType.BODACC, SIREN))

        data = json.loads(result.payload)
        assert data["total_count"] == 0
        assert data["records"] == []

    async def test_unreadable_json_becomes_failure(self, settings) -> None:
        def handler(request):
            return httpx.Response(200, text="<html>maintenance</html>")

        fetcher, _ = make_fetcher(settings, handler)
        result = await fetcher.fetch(BodaccAdapter(settings), DocumentRequest(DocumentType.BODACC, SIREN))

        assert result.success is False
        assert result.error_kind is ErrorKind.UPSTREAM_UNAVAILABLE

    async def test_non_object_payload_becomes_failure(self, settings) -> None:
        def handler(request):
            return httpx.Response(200, json=[1, 2, 3])

        fetcher, _ = make_fetcher(settings, handler)
        result = await fetcher.fetch(BodaccAdapter(settings), DocumentRequest(DocumentType.BODACC, SIREN))

        assert result.error_kind is ErrorKind.UPSTREAM_UNAVAILABLE
