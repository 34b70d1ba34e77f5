import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Company:
    """Сущность компании (юридического лица по SIREN)"""
    siren: str
    denomination: str
    id: Optional[uuid.UUID] = None
    date_creation: Optional[datetime] = None
    date_immatriculation: Optional[datetime] = None
    active: bool = True
    adresse_siege: Optional[str] = None
    nature_entreprise: Optional[str] = None
    forme_juridique: Optional[str] = None
    code_ape: Optional[str] = None
    libelle_ape: Optional[str] = None
    capital_social: Optional[float] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class FinancialRatio:
    year: int
    ratio_type: str
    value: float
    company_id: Optional[uuid.UUID] = None


@dataclass
class Publication:
    """Публикация BODACC в нормализованном виде"""
    siren: Optional[str]
    date_publication: Optional[str]
    type_annonce: Optional[str] = None
    reference: Optional[str] = None
    denomination: Optional[str] = None
    description: Optional[str] = None
    texte: Optional[str] = None
    lien_document: Optional[str] = None
    raw: dict = field(default_factory=dict, repr=False)
