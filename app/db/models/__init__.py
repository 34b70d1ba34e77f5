from app.db.models.company import Company
from app.db.models.document import Document, DocumentSource
from app.db.models.financial_ratio import FinancialRatio

__all__ = [
    "Company",
    "Document",
    "DocumentSource",
    "FinancialRatio"
]
