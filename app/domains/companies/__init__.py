from app.domains.companies.entities import Company, FinancialRatio, Publication
from app.domains.companies.schemas import (
    CompanyResponse, CompanySearchResponse, CompanySummaryResponse,
    PublicationResponse, FinancialRatioResponse, StoredRatioResponse
)

__all__ = [
    "Company", "FinancialRatio", "Publication",
    "CompanyResponse", "CompanySearchResponse", "CompanySummaryResponse",
    "PublicationResponse", "FinancialRatioResponse", "StoredRatioResponse"
]
