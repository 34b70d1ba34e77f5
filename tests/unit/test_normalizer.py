import json
from datetime import datetime, timezone

import pytest

from app.core.errors import ErrorKind, REDACTED_MESSAGE
from app.domains.documents.entities import DocumentType, UpstreamResult
from app.domains.documents.normalizer import normalize

FETCHED_AT = datetime(2025, 1, 15, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "kind, status",
    [
        (ErrorKind.INVALID_IDENTIFIER, 400),
        (ErrorKind.NOT_FOUND, 404),
        (ErrorKind.INTERNAL_FAULT, 500),
        (ErrorKind.UPSTREAM_UNAVAILABLE, 502),
        (ErrorKind.SERVICE_NOT_CONFIGURED, 503),
    ],
)
def test_failure_status_follows_error_kind(kind: ErrorKind, status: int) -> None:
    response = normalize(UpstreamResult.failure(kind, "boom"), DocumentType.INSEE)

    assert response.status_code == status
    assert response.headers["Content-Type"].startswith("application/json")
    assert json.loads(response.body)["error"] == kind.value


def test_failure_body_carries_message() -> None:
    result = UpstreamResult.failure(ErrorKind.UPSTREAM_UNAVAILABLE, "INSEE API error: 500 Internal Server Error", http_status=500)

    response = normalize(result, DocumentType.INSEE)

    assert json.loads(response.body) == {
        "error": "UpstreamUnavailable",
        "message": "INSEE API error: 500 Internal Server Error",
    }


def test_internal_fault_message_is_redacted() -> None:
    result = UpstreamResult.failure(ErrorKind.INTERNAL_FAULT, "KeyError: 'token' in adapters.py")

    body = json.loads(normalize(result, DocumentType.INPI).body)

    assert body["message"] == REDACTED_MESSAGE


def test_internal_fault_message_is_kept_in_debug() -> None:
    result = UpstreamResult.failure(ErrorKind.INTERNAL_FAULT, "KeyError: 'token'")

    body = json.loads(normalize(result, DocumentType.INPI, debug=True).body)

    assert body["message"] == "KeyError: 'token'"


def test_pdf_success_headers() -> None:
    result = UpstreamResult.ok(b"%PDF-1.4", "application/pdf", "INPI_RNE_552032534.pdf", FETCHED_AT)

    response = normalize(result, DocumentType.INPI)

    assert response.status_code == 200
    assert response.body == b"%PDF-1.4"
    assert response.headers == {
        "Content-Type": "application/pdf",
        "Content-Disposition": 'attachment; filename="INPI_RNE_552032534.pdf"',
        "Cache-Control": "no-cache",
        "Content-Length": "8",
    }


def test_content_length_counts_utf8_bytes() -> None:
    text = '{"commercant": "Société Générale à Nîmes"}'
    result = UpstreamResult.ok(text, "application/json", "BODACC_Data_552032534.json", FETCHED_AT)

    response = normalize(result, DocumentType.BODACC)

    assert int(response.headers["Content-Length"]) == len(text.encode("utf-8"))
    assert int(response.headers["Content-Length"]) > len(text)
    assert response.body.decode("utf-8") == text
    assert response.headers["Content-Type"] == "application/json; charset=utf-8"
