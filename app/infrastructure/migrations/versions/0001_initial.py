"""companies, documents, financial ratios

Revision ID: 0001_initial
Revises:
Create Date: 2025-06-28 23:15:12
"""
from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("siren", sa.String(9), nullable=False),
        sa.Column("denomination", sa.String(255), nullable=False),
        sa.Column("date_creation", sa.DateTime(timezone=True), nullable=True),
        sa.Column("date_immatriculation", sa.DateTime(timezone=True), nullable=True),
        sa.Column("active", sa.Boolean(), nullable=True),
        sa.Column("adresse_siege", sa.String(512), nullable=True),
        sa.Column("nature_entreprise", sa.String(255), nullable=True),
        sa.Column("forme_juridique", sa.String(255), nullable=True),
        sa.Column("code_ape", sa.String(16), nullable=True),
        sa.Column("libelle_ape", sa.String(255), nullable=True),
        sa.Column("capital_social", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_companies_siren", "companies", ["siren"], unique=True)
    op.create_index("ix_companies_denomination", "companies", ["denomination"])
    op.create_index("ix_companies_active", "companies", ["active"])
    op.create_index("ix_companies_code_ape", "companies", ["code_ape"])

    op.create_table(
        "documents",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("company_id", sa.UUID(as_uuid=True), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("date_publication", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type_document", sa.String(255), nullable=False),
        sa.Column("source", sa.String(16), nullable=False),
        sa.Column("type_avis", sa.String(255), nullable=True),
        sa.Column("reference", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("contenu", sa.Text(), nullable=True),
        sa.Column("lien_document", sa.String(1024), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint("company_id", "reference", name="uq_documents_company_reference"),
    )
    op.create_index("ix_documents_company_id", "documents", ["company_id"])
    op.create_index("ix_documents_source", "documents", ["source"])
    op.create_index("ix_documents_type_document", "documents", ["type_document"])
    op.create_index("ix_documents_company_date", "documents", ["company_id", "date_publication"])

    op.create_table(
        "financial_ratios",
        sa.Column("id", sa.UUID(as_uuid=True), primary_key=True),
        sa.Column("company_id", sa.UUID(as_uuid=True), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("ratio_type", sa.String(64), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_financial_ratios_company_id", "financial_ratios", ["company_id"])


def downgrade() -> None:
    op.drop_table("financial_ratios")
    op.drop_table("documents")
    op.drop_table("companies")
