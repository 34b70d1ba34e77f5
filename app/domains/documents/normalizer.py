from dataclasses import dataclass, field
from typing import Dict, Optional

from app.core.errors import ErrorKind, HTTP_STATUS_BY_KIND, REDACTED_MESSAGE
from app.domains.documents.adapters import JSON_CONTENT_TYPE, serialize_json
from app.domains.documents.entities import DocumentType, UpstreamResult


@dataclass
class NormalizedResponse:
    """Готовый HTTP-ответ: статус, заголовки, тело"""
    status_code: int
    body: bytes
    headers: Dict[str, str] = field(default_factory=dict)


def error_body(kind: ErrorKind, message: str) -> bytes:
    return serialize_json({"error": kind.value, "message": message}).encode("utf-8")


def normalize(result: UpstreamResult, document_type: Optional[DocumentType], debug: bool = False) -> NormalizedResponse:
    """Преобразование результата адаптера в ответ для клиента"""
    if not result.success:
        kind = result.error_kind or ErrorKind.INTERNAL_FAULT
        message = result.error_message or kind.value
        if kind is ErrorKind.INTERNAL_FAULT and not debug:
            message = REDACTED_MESSAGE

        body = error_body(kind, message)
        return NormalizedResponse(
            status_code=HTTP_STATUS_BY_KIND[kind],
            body=body,
            headers={"Content-Type": JSON_CONTENT_TYPE, "Content-Length": str(len(body))},
        )

    payload = result.payload
    # Длина в байтах UTF-8, а не в символах
    body = payload.encode("utf-8") if isinstance(payload, str) else bytes(payload or b"")

    if document_type is DocumentType.BODACC:
        content_type = JSON_CONTENT_TYPE
    else:
        content_type = result.content_type or "application/pdf"

    return NormalizedResponse(
        status_code=200,
        body=body,
        headers={
            "Content-Type": content_type,
            "Content-Disposition": f'attachment; filename="{result.file_name}"',
            "Cache-Control": "no-cache",
            "Content-Length": str(len(body)),
        },
    )
