from typing import Optional, List, Sequence, TYPE_CHECKING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from sqlalchemy.exc import IntegrityError
import uuid

from app.core.db import dialect_insert
from app.db.models.company import Company as CompanyModel
from app.db.models.financial_ratio import FinancialRatio as FinancialRatioModel

if TYPE_CHECKING:
    from app.domains.companies.entities import Company, FinancialRatio


class CompanyRepository:
    """Репозиторий для работы с компаниями"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_siren(self, siren: str) -> Optional["Company"]:
        """Получение компании по SIREN"""
        result = await self.session.execute(
            select(CompanyModel).where(CompanyModel.siren == siren)
        )
        db_company = result.scalar_one_or_none()
        return self._to_domain(db_company) if db_company else None

    async def create(self, company: "Company") -> "Company":
        """Создание компании; при гонке возвращает уже существующую запись"""
        db_company = CompanyModel(
            siren=company.siren,
            denomination=company.denomination,
            date_creation=company.date_creation,
            date_immatriculation=company.date_immatriculation,
            active=company.active,
            adresse_siege=company.adresse_siege,
            nature_entreprise=company.nature_entreprise,
            forme_juridique=company.forme_juridique,
            code_ape=company.code_ape,
            libelle_ape=company.libelle_ape,
            capital_social=company.capital_social
        )

        self.session.add(db_company)
        try:
            await self.session.commit()
        except IntegrityError:
            # Параллельный запрос успел создать ту же компанию
            await self.session.rollback()
            existing = await self.get_by_siren(company.siren)
            if existing is None:
                raise
            return existing

        await self.session.refresh(db_company)
        return self._to_domain(db_company)

    async def get_by_sirens(self, sirens: Sequence[str]) -> List["Company"]:
        """Компании по списку SIREN"""
        if not sirens:
            return []

        result = await self.session.execute(
            select(CompanyModel).where(CompanyModel.siren.in_(list(sirens)))
        )
        return [self._to_domain(company) for company in result.scalars().all()]

    async def search(self, query: str, limit: int = 20) -> List["Company"]:
        """Поиск по SIREN, наименованию и виду деятельности (без учета регистра)"""
        needle = query.lower()
        result = await self.session.execute(
            select(CompanyModel)
            .where(or_(
                CompanyModel.siren.contains(query, autoescape=True),
                func.lower(CompanyModel.denomination).contains(needle, autoescape=True),
                func.lower(CompanyModel.libelle_ape).contains(needle, autoescape=True),
            ))
            .order_by(CompanyModel.updated_at.desc(), CompanyModel.denomination)
            .limit(limit)
        )
        return [self._to_domain(company) for company in result.scalars().all()]

    async def upsert_many(self, companies: Sequence["Company"]) -> None:
        """Вставка компаний; существующие по SIREN обновляются"""
        if not companies:
            return

        # Один SIREN в пакете не больше одного раза: ON CONFLICT не обновляет строку дважды
        unique = {company.siren: company for company in companies}.values()

        insert = dialect_insert(self.session)
        stmt = insert(CompanyModel).values([
            {
                "id": uuid.uuid4(),
                "siren": company.siren,
                "denomination": company.denomination,
                "date_creation": company.date_creation,
                "active": company.active,
                "adresse_siege": company.adresse_siege,
                "forme_juridique": company.forme_juridique,
                "code_ape": company.code_ape,
                "libelle_ape": company.libelle_ape,
            }
            for company in unique
        ])
        stmt = stmt.on_conflict_do_update(
            index_elements=["siren"],
            set_={
                "denomination": stmt.excluded.denomination,
                "active": stmt.excluded.active,
                "adresse_siege": stmt.excluded.adresse_siege,
                "forme_juridique": stmt.excluded.forme_juridique,
                "code_ape": stmt.excluded.code_ape,
                "updated_at": func.now(),
            },
        )
        await self.session.execute(stmt)
        await self.session.commit()

    async def get_financial_ratios(self, company_id, limit: int = 5) -> List["FinancialRatio"]:
        """Последние финансовые показатели компании"""
        from app.domains.companies.entities import FinancialRatio

        result = await self.session.execute(
            select(FinancialRatioModel)
            .where(FinancialRatioModel.company_id == company_id)
            .order_by(FinancialRatioModel.year.desc())
            .limit(limit)
        )
        return [
            FinancialRatio(
                year=ratio.year,
                ratio_type=ratio.ratio_type,
                value=ratio.value,
                company_id=ratio.company_id
            )
            for ratio in result.scalars().all()
        ]

    def _to_domain(self, db_company: CompanyModel) -> "Company":
        """Преобразование модели БД в доменную сущность"""
        from app.domains.companies.entities import Company

        return Company(
            id=db_company.id,
            siren=db_company.siren,
            denomination=db_company.denomination,
            date_creation=db_company.date_creation,
            date_immatriculation=db_company.date_immatriculation,
            active=db_company.active,
            adresse_siege=db_company.adresse_siege,
            nature_entreprise=db_company.nature_entreprise,
            forme_juridique=db_company.forme_juridique,
            code_ape=db_company.code_ape,
            libelle_ape=db_company.libelle_ape,
            capital_social=db_company.capital_social,
            created_at=db_company.created_at,
            updated_at=db_company.updated_at
        )
