from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
import uuid
from datetime import datetime

from app.domains.documents.schemas import DocumentResponse


class PublicationResponse(BaseModel):
    """Публикация BODACC в карточке компании"""
    siren: Optional[str] = None
    date_publication: Optional[str] = None
    type_annonce: Optional[str] = None
    reference: Optional[str] = None
    denomination: Optional[str] = None
    description: Optional[str] = None
    lien_document: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class FinancialRatioResponse(BaseModel):
    """Финансовые показатели за год"""
    year: Optional[int] = None
    chiffre_d_affaires: Optional[float] = None
    resultat_net: Optional[float] = None
    marge_brute: Optional[float] = None
    ebe: Optional[float] = None
    taux_d_endettement: Optional[float] = None


class StoredRatioResponse(BaseModel):
    year: int
    ratio_type: str
    value: float

    model_config = ConfigDict(from_attributes=True)


class CompanyResponse(BaseModel):
    """Схема для ответа с карточкой компании"""
    id: uuid.UUID
    siren: str
    denomination: str
    forme_juridique: Optional[str] = None
    adresse_siege: Optional[str] = None
    code_ape: Optional[str] = None
    libelle_ape: Optional[str] = None
    date_creation: Optional[datetime] = None
    active: bool = True
    capital_social: Optional[float] = None
    documents: List[DocumentResponse] = Field(default_factory=list)
    stored_ratios: List[StoredRatioResponse] = Field(default_factory=list)
    publications: List[PublicationResponse] = Field(default_factory=list)
    financial_ratios: List[FinancialRatioResponse] = Field(default_factory=list)


class CompanySummaryResponse(BaseModel):
    """Компания в результатах поиска"""
    id: Optional[uuid.UUID] = None
    siren: str
    denomination: str
    forme_juridique: Optional[str] = None
    adresse_siege: Optional[str] = None
    code_ape: Optional[str] = None
    libelle_ape: Optional[str] = None
    date_creation: Optional[datetime] = None
    active: bool = True

    model_config = ConfigDict(from_attributes=True)


class CompanySearchResponse(BaseModel):
    results: List[CompanySummaryResponse] = Field(default_factory=list)
    source: str
    total: int
