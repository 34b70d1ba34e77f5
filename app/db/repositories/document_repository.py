from typing import Optional, List, Sequence, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
import uuid

from app.core.db import dialect_insert
from app.db.models.company import Company as CompanyModel
from app.db.models.document import Document as DocumentModel

if TYPE_CHECKING:
    from app.domains.documents.entities import Document


class DocumentRepository:
    """Репозиторий для работы с документами компаний"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_siren(self, siren: str, limit: Optional[int] = None) -> List["Document"]:
        """Документы компании, новые первыми"""
        query = (
            select(DocumentModel)
            .join(CompanyModel, DocumentModel.company_id == CompanyModel.id)
            .where(CompanyModel.siren == siren)
            .order_by(DocumentModel.date_publication.desc())
        )
        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def create_many(self, documents: Sequence["Document"], skip_duplicates: bool = True) -> int:
        """Пакетная вставка документов; возвращает число вставленных строк.

        С skip_duplicates=True строки, нарушающие уникальность
        (company_id, reference), молча пропускаются, без слияния.
        """
        if not documents:
            return 0

        rows = [self._to_row(document) for document in documents]
        insert = dialect_insert(self.session)

        stmt = insert(DocumentModel).values(rows)
        if skip_duplicates:
            stmt = stmt.on_conflict_do_nothing(index_elements=["company_id", "reference"])

        try:
            result = await self.session.execute(stmt)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise
        return max(result.rowcount or 0, 0)

    def _to_row(self, document: "Document") -> dict:
        return {
            "id": document.id or uuid.uuid4(),
            "company_id": document.company_id,
            "date_publication": document.date_publication,
            "type_document": document.type_document,
            "source": document.source,
            "type_avis": document.type_avis,
            "reference": document.reference,
            "description": document.description,
            "contenu": document.contenu,
            "lien_document": document.lien_document
        }

    def _to_domain(self, db_document: DocumentModel) -> "Document":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.documents.entities import Document

        return Document(
            id=db_document.id,
            company_id=db_document.company_id,
            date_publication=db_document.date_publication,
            type_document=db_document.type_document,
            source=db_document.source,
            type_avis=db_document.type_avis,
            reference=db_document.reference,
            description=db_document.description,
            contenu=db_document.contenu,
            lien_document=db_document.lien_document,
            created_at=db_document.created_at
        )
