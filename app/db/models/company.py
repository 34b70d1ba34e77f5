from sqlalchemy import Column, String, Boolean, DateTime, Float
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class Company(BaseModel):
    __tablename__ = "companies"

    siren = Column(String(9), unique=True, index=True, nullable=False)
    denomination = Column(String(255), nullable=False, index=True)
    date_creation = Column(DateTime(timezone=True), nullable=True)
    date_immatriculation = Column(DateTime(timezone=True), nullable=True)
    active = Column(Boolean, default=True, index=True)
    adresse_siege = Column(String(512), nullable=True)
    nature_entreprise = Column(String(255), nullable=True)
    forme_juridique = Column(String(255), nullable=True)
    code_ape = Column(String(16), nullable=True, index=True)
    libelle_ape = Column(String(255), nullable=True)
    capital_social = Column(Float, nullable=True)

    # Relationships
    documents = relationship("Document", back_populates="company", cascade="all, delete-orphan")
    financial_ratios = relationship("FinancialRatio", back_populates="company", cascade="all, delete-orphan")
