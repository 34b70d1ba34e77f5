import hashlib
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFound
from app.db.repositories.company_repository import CompanyRepository
from app.db.repositories.document_repository import DocumentRepository
from app.domains.documents.entities import Document

_logger = logging.getLogger(__name__)


def fallback_reference(document: Document) -> str:
    """Детерминированный ключ документа без ссылки источника"""
    parts = (
        document.source.value,
        document.date_publication.date().isoformat(),
        document.type_document,
        document.type_avis or "",
        document.description or "",
        document.contenu or "",
        document.lien_document or "",
    )
    digest = hashlib.sha256("\x1f".join(parts).encode("utf-8")).hexdigest()[:32]
    return f"{document.source.value}-{digest}"


class DocumentMirror:
    """Локальное зеркало документов: get/put по SIREN.

    Последовательность "промах -> запрос во внешний API -> сохранение"
    выполняет вызывающий код. Блокировок нет: дубликаты при параллельной
    записи отсекаются ограничением уникальности (company_id, reference).
    """

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None):
        self.company_repository = CompanyRepository(session)
        self.document_repository = DocumentRepository(session)
        self.logger = logger or _logger

    async def get(self, siren: str) -> Optional[List[Document]]:
        documents = await self.document_repository.get_by_siren(siren)
        return documents or None

    async def put(self, siren: str, documents: List[Document]) -> int:
        company = await self.company_repository.get_by_siren(siren)
        if company is None:
            raise NotFound(f"Company {siren} is not known locally")

        for document in documents:
            document.company_id = company.id
            if not document.reference:
                document.reference = fallback_reference(document)

        inserted = await self.document_repository.create_many(documents, skip_duplicates=True)
        self.logger.info(
            f"{inserted} documents stored in local mirror",
            extra={"siren": siren},
        )
        return inserted
