from app.db.repositories.company_repository import CompanyRepository
from app.db.repositories.document_repository import DocumentRepository

__all__ = [
    "CompanyRepository",
    "DocumentRepository"
]
