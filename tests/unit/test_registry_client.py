import httpx
import pytest

from app.core.errors import ServiceNotConfigured, UpstreamUnavailable
from app.infrastructure.clients.registry_client import RegistryClient, format_address, to_float


def make_client(settings, handler) -> RegistryClient:
    return RegistryClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)), settings)


class TestPayloadShape:
    async def test_list_payload_is_rejected(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(200, json=[{"x": 1}]))

        with pytest.raises(UpstreamUnavailable, match="unexpected payload"):
            await client.get_financial_ratios("552032534")

    async def test_non_dict_records_are_skipped(self, settings) -> None:
        payload = {"results": ["junk", {"date_cloture_exercice": "2022-12-31", "resultat_net": 5.0}]}
        client = make_client(settings, lambda request: httpx.Response(200, json=payload))

        ratios = await client.get_financial_ratios("552032534")

        assert [ratio["year"] for ratio in ratios] == [2022]

    async def test_malformed_unite_legale(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(200, json={"uniteLegale": "DANONE"}))

        with pytest.raises(UpstreamUnavailable):
            await client.get_company_by_siren("552032534")


class TestSearchSirene:
    async def test_requires_token(self, settings) -> None:
        settings.insee_api_token = ""
        client = make_client(settings, lambda request: httpx.Response(200, json={}))

        with pytest.raises(ServiceNotConfigured):
            await client.search_sirene("danone")

    async def test_one_company_per_siren(self, settings) -> None:
        payload = {
            "etablissements": [
                {"siren": "552032534", "uniteLegale": {"denominationUniteLegale": "DANONE"}},
                {"siren": "552032534", "uniteLegale": {"denominationUniteLegale": "DANONE"}},
                {"siren": "414842062", "uniteLegale": {"prenom1UniteLegale": "JEAN", "nomUniteLegale": "DUPONT",
                                                       "etatAdministratifUniteLegale": "C"}},
                {"siren": "4148", "uniteLegale": {}},
                {"siren": "123456789"},
            ]
        }
        client = make_client(settings, lambda request: httpx.Response(200, json=payload))

        companies = await client.search_sirene("danone")

        assert [company.siren for company in companies] == ["552032534", "414842062"]
        assert companies[1].denomination == "JEAN DUPONT"
        assert companies[1].active is False

    async def test_not_found_gives_empty_list(self, settings) -> None:
        client = make_client(settings, lambda request: httpx.Response(404))

        assert await client.search_sirene("zzz-inconnu") == []


def test_format_address() -> None:
    address = {
        "numeroVoieEtablissement": "17",
        "typeVoieEtablissement": "BD",
        "libelleVoieEtablissement": "HAUSSMANN",
        "codePostalEtablissement": "75009",
        "libelleCommuneEtablissement": "PARIS",
    }

    assert format_address(address) == "17 BD HAUSSMANN, 75009 PARIS"
    assert format_address({"libelleCommuneEtablissement": "LYON"}) == "LYON"
    assert format_address(None) is None


@pytest.mark.parametrize("value, expected", [("12.5", 12.5), (3, 3.0), ("N/A", None), (None, None), (True, None)])
def test_to_float(value, expected) -> None:
    assert to_float(value) == expected
