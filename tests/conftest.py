from datetime import datetime, timezone
from pathlib import Path

import pytest

from app.core.config import Settings

SIREN = "552032534"
SIRET = "55203253400001"


@pytest.fixture()
def files_root(tmp_path: Path) -> Path:
    root = tmp_path / "uploads"
    root.mkdir()
    return root


@pytest.fixture()
def settings(files_root: Path) -> Settings:
    """Settings with credentials filled in and upstreams on test hosts."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        inpi_api_token="inpi-token",
        insee_api_token="insee-token",
        insee_pdf_base_url="https://insee.test",
        inpi_base_url="https://inpi.test",
        bodacc_base_url="https://bodacc.test",
        sirene_base_url="https://sirene.test/V3.11",
        ratios_base_url="https://ratios.test",
        upstream_timeout_seconds=5,
        files_root=str(files_root),
    )


@pytest.fixture()
def fixed_clock():
    moment = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)
    return lambda: moment
