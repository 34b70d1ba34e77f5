import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Union

from app.core.errors import ErrorKind
from app.db.models.document import DocumentSource


class DocumentType(str, enum.Enum):
    """Типы документов, доступные для скачивания"""
    INSEE = "insee"
    INPI = "inpi"
    BODACC = "bodacc"

    @classmethod
    def supported(cls) -> list:
        return [member.value for member in cls]


@dataclass(frozen=True)
class DocumentRequest:
    document_type: DocumentType
    siren: str
    siret: Optional[str] = None


@dataclass(frozen=True)
class UpstreamRequest:
    """Готовый к отправке запрос во внешний API"""
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[Dict[str, Any]] = None


@dataclass
class UpstreamResult:
    """Результат обращения к внешнему источнику (успех или ошибка)"""
    success: bool
    payload: Union[bytes, str, None] = None
    content_type: Optional[str] = None
    file_name: Optional[str] = None
    size_bytes: int = 0
    fetched_at: Optional[datetime] = None
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None
    http_status: Optional[int] = None

    @classmethod
    def ok(cls, payload: Union[bytes, str], content_type: str, file_name: str, fetched_at: datetime) -> "UpstreamResult":
        size = len(payload.encode("utf-8")) if isinstance(payload, str) else len(payload)
        return cls(
            success=True,
            payload=payload,
            content_type=content_type,
            file_name=file_name,
            size_bytes=size,
            fetched_at=fetched_at,
        )

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, http_status: Optional[int] = None) -> "UpstreamResult":
        return cls(success=False, error_kind=kind, error_message=message, http_status=http_status)


@dataclass
class Document:
    """Документ компании, хранимый в локальном зеркале"""
    date_publication: datetime
    type_document: str
    source: DocumentSource
    reference: Optional[str] = None
    type_avis: Optional[str] = None
    description: Optional[str] = None
    contenu: Optional[str] = None
    lien_document: Optional[str] = None
    company_id: Optional[uuid.UUID] = None
    id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
