from app.domains.documents.entities import (
    Document, DocumentRequest, DocumentType, UpstreamRequest, UpstreamResult
)
from app.domains.documents.schemas import DocumentResponse, ErrorResponse
from app.domains.documents.services import DocumentGatewayService
from app.domains.documents.mirror import DocumentMirror

__all__ = [
    "Document", "DocumentRequest", "DocumentType", "UpstreamRequest", "UpstreamResult",
    "DocumentResponse", "ErrorResponse",
    "DocumentGatewayService", "DocumentMirror"
]
