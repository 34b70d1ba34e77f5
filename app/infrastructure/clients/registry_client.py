"""Клиент открытых реестров: SIRENE, BODACC, финансовые показатели."""
import logging
from datetime import datetime
from typing import List, Optional

import httpx

from app.core.config import Settings
from app.core.errors import ServiceNotConfigured, UpstreamUnavailable
from app.domains.companies.entities import Company, Publication
from app.domains.documents.identifiers import validate_siren

_logger = logging.getLogger(__name__)

BODACC_PUBLICATIONS_LIMIT = 50
FINANCIAL_RATIOS_LIMIT = 100
SIRENE_SEARCH_LIMIT = 20


def parse_date(value) -> Optional[datetime]:
    """Дата ISO (YYYY-MM-DD или полная) или None"""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_address(address) -> Optional[str]:
    """Адрес заведения SIRENE одной строкой"""
    if not isinstance(address, dict):
        return None

    street = " ".join(
        str(address[key]) for key in (
            "numeroVoieEtablissement", "typeVoieEtablissement", "libelleVoieEtablissement"
        ) if address.get(key)
    )
    city = " ".join(
        str(address[key]) for key in ("codePostalEtablissement", "libelleCommuneEtablissement") if address.get(key)
    )
    return ", ".join(part for part in (street, city) if part) or None


def to_float(value) -> Optional[float]:
    """Число из ответа API; нечисловые значения дают None"""
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class RegistryClient:
    """Обращения к открытым API для карточки компании"""

    def __init__(self, client: httpx.AsyncClient, settings: Settings, logger: Optional[logging.Logger] = None):
        self.client = client
        self.settings = settings
        self.logger = logger or _logger

    async def _get_json(self, api_name: str, url: str, params: Optional[dict] = None, headers: Optional[dict] = None):
        request_headers = {"Accept": "application/json", "User-Agent": self.settings.user_agent}
        request_headers.update(headers or {})

        try:
            response = await self.client.get(
                url,
                params=params,
                headers=request_headers,
                timeout=self.settings.upstream_timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"{api_name}: no response from server ({type(e).__name__})")

        if response.status_code == 404:
            return None
        if not response.is_success:
            raise UpstreamUnavailable(
                f"{api_name} API error: {response.status_code} {response.reason_phrase}".rstrip(),
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise UpstreamUnavailable(f"{api_name} returned an unreadable response")

        if not isinstance(data, dict):
            raise UpstreamUnavailable(f"{api_name} returned an unexpected payload")
        return data

    def _records(self, api_name: str, data: dict, key: str = "results") -> List[dict]:
        records = data.get(key) or []
        if not isinstance(records, list):
            raise UpstreamUnavailable(f"{api_name} returned an unexpected payload")
        return [record for record in records if isinstance(record, dict)]

    async def get_company_by_siren(self, siren: str) -> Optional[Company]:
        """Юридическое лицо из SIRENE; None, если SIREN неизвестен"""
        if not self.settings.insee_api_token:
            raise ServiceNotConfigured("INSEE API token not available")

        base = self.settings.sirene_base_url.rstrip("/")
        data = await self._get_json(
            "SIRENE",
            f"{base}/siren/{siren}",
            headers={"Authorization": f"Bearer {self.settings.insee_api_token}"},
        )
        unite_legale = (data or {}).get("uniteLegale")
        if not unite_legale:
            return None
        if not isinstance(unite_legale, dict) or not unite_legale.get("siren"):
            raise UpstreamUnavailable("SIRENE returned an unexpected payload")

        return self._to_company(unite_legale)

    async def search_sirene(self, query: str, limit: int = SIRENE_SEARCH_LIMIT) -> List[Company]:
        """Поиск заведений в SIRENE; по одной записи на SIREN"""
        if not self.settings.insee_api_token:
            raise ServiceNotConfigured("INSEE API token not available")

        base = self.settings.sirene_base_url.rstrip("/")
        data = await self._get_json(
            "SIRENE",
            f"{base}/siret",
            params={"q": query, "nombre": limit},
            headers={"Authorization": f"Bearer {self.settings.insee_api_token}"},
        )
        if not data:
            return []

        companies = {}
        for etablissement in self._records("SIRENE", data, key="etablissements"):
            company = self._search_result_to_company(etablissement)
            if company is not None and company.siren not in companies:
                companies[company.siren] = company
        return list(companies.values())

    async def get_bodacc_publications(self, siren: str, limit: int = BODACC_PUBLICATIONS_LIMIT) -> List[Publication]:
        """Публикации BODACC по SIREN, новые первыми"""
        base = self.settings.bodacc_base_url.rstrip("/")
        data = await self._get_json(
            "BODACC",
            f"{base}/api/explore/v2.1/catalog/datasets/annonces-commerciales/records",
            params={
                "where": f'registre like "{siren}%"',
                "limit": limit,
                "order_by": "dateparution desc",
            },
        )
        if not data:
            return []

        return [self._to_publication(siren, record) for record in self._records("BODACC", data)]

    async def get_financial_ratios(self, siren: str, limit: int = FINANCIAL_RATIOS_LIMIT) -> List[dict]:
        """Финансовые показатели (ratios_inpi_bce), последние годы первыми"""
        base = self.settings.ratios_base_url.rstrip("/")
        data = await self._get_json(
            "Financial Ratios",
            f"{base}/api/explore/v2.1/catalog/datasets/ratios_inpi_bce/records",
            params={
                "where": f'siren="{siren}"',
                "limit": limit,
                "order_by": "date_cloture_exercice desc",
            },
        )
        if not data:
            return []

        ratios = []
        for record in self._records("Financial Ratios", data):
            closing = parse_date(record.get("date_cloture_exercice"))
            ratios.append({
                "year": closing.year if closing else None,
                "chiffre_d_affaires": record.get("chiffre_d_affaires"),
                "resultat_net": record.get("resultat_net"),
                "marge_brute": record.get("marge_brute"),
                "ebe": record.get("ebe"),
                "taux_d_endettement": record.get("taux_d_endettement"),
            })
        return ratios

    def _to_company(self, unite_legale: dict) -> Company:
        # Актуальные значения SIRENE хранит в первом периоде
        periods = unite_legale.get("periodesUniteLegale") or [{}]
        first_period = periods[0] if isinstance(periods, list) and isinstance(periods[0], dict) else {}
        current = {**first_period, **unite_legale}

        denomination = current.get("denominationUniteLegale") or " ".join(
            part for part in (current.get("prenom1UniteLegale"), current.get("nomUniteLegale")) if part
        )

        return Company(
            siren=unite_legale["siren"],
            denomination=denomination or unite_legale["siren"],
            date_creation=parse_date(current.get("dateCreationUniteLegale")),
            active=current.get("etatAdministratifUniteLegale", "A") == "A",
            forme_juridique=current.get("categorieJuridiqueUniteLegale"),
            code_ape=current.get("activitePrincipaleUniteLegale"),
            capital_social=to_float(current.get("capitalSocialUniteLegale")),
        )

    def _to_publication(self, siren: str, record: dict) -> Publication:
        reference = record.get("id") or record.get("numerodannonce")
        return Publication(
            siren=siren,
            date_publication=record.get("dateparution"),
            type_annonce=record.get("typeavis_lib") or record.get("typeavis"),
            reference=str(reference) if reference is not None else None,
            denomination=record.get("commercant"),
            description=record.get("familleavis_lib"),
            texte=record.get("texte"),
            lien_document=record.get("url_complete"),
            raw=record,
        )

    def _search_result_to_company(self, etablissement: dict) -> Optional[Company]:
        unite_legale = etablissement.get("uniteLegale")
        if not isinstance(unite_legale, dict):
            return None

        siren = str(etablissement.get("siren") or unite_legale.get("siren") or "")
        if not validate_siren(siren):
            return None

        denomination = unite_legale.get("denominationUniteLegale") or " ".join(
            part for part in (unite_legale.get("prenom1UniteLegale"), unite_legale.get("nomUniteLegale")) if part
        )
        address = format_address(etablissement.get("adresseEtablissement"))

        return Company(
            siren=siren,
            denomination=denomination or siren,
            date_creation=parse_date(etablissement.get("dateCreationEtablissement")),
            active=unite_legale.get("etatAdministratifUniteLegale", "A") == "A",
            forme_juridique=unite_legale.get("categorieJuridiqueUniteLegale"),
            code_ape=unite_legale.get("activitePrincipaleUniteLegale"),
            libelle_ape=unite_legale.get("activitePrincipaleUniteLegale"),
            adresse_siege=address,
        )
