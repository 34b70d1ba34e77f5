import enum

from sqlalchemy import Column, String, Text, DateTime, ForeignKey, UUID, Enum, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class DocumentSource(str, enum.Enum):
    BODACC = "BODACC"
    INSEE = "INSEE"
    INPI = "INPI"


class Document(BaseModel):
    __tablename__ = "documents"
    __table_args__ = (
        # Повторная запись с той же ссылкой молча пропускается
        UniqueConstraint("company_id", "reference", name="uq_documents_company_reference"),
        Index("ix_documents_company_date", "company_id", "date_publication"),
    )

    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    date_publication = Column(DateTime(timezone=True), nullable=False)
    type_document = Column(String(255), nullable=False, index=True)
    source = Column(Enum(DocumentSource, native_enum=False, length=16), nullable=False, index=True)
    type_avis = Column(String(255), nullable=True)
    # Без ссылки от источника зеркало подставляет ключ из содержимого документа
    reference = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    contenu = Column(Text, nullable=True)
    lien_document = Column(String(1024), nullable=True)

    # Relationships
    company = relationship("Company", back_populates="documents")
