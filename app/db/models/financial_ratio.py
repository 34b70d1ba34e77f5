from sqlalchemy import Column, String, Integer, Float, ForeignKey, UUID
from sqlalchemy.orm import relationship

from app.db.base import BaseModel


class FinancialRatio(BaseModel):
    __tablename__ = "financial_ratios"

    company_id = Column(UUID(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    ratio_type = Column(String(64), nullable=False)
    value = Column(Float, nullable=False)

    # Relationships
    company = relationship("Company", back_populates="financial_ratios")
