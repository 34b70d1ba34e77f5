from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./registry.db"
    database_echo: bool = False

    debug: bool = False
    log_level: str = "INFO"

    # Токены внешних API
    inpi_api_token: str = ""
    insee_api_token: str = ""

    # Базовые адреса внешних API
    insee_pdf_base_url: str = "https://api-avis-situation-sirene.insee.fr"
    inpi_base_url: str = "https://data.inpi.fr"
    bodacc_base_url: str = "https://bodacc-datadila.opendatasoft.com"
    sirene_base_url: str = "https://api.insee.fr/entreprises/sirene/V3.11"
    ratios_base_url: str = "https://data.economie.gouv.fr"

    upstream_timeout_seconds: float = 30.0
    user_agent: str = "DataCorp-Platform/1.0 (Document Download Service)"
    insee_use_spaced_siret: bool = True
    # SIRET должен начинаться с переданного SIREN
    strict_siret_match: bool = True

    # Раздача файлов
    files_root: str = "uploads"
    max_served_file_bytes: int = 50 * 1024 * 1024

    model_config = {"env_file": ".env", "extra": "ignore"}


@lru_cache
def get_settings() -> Settings:
    """Настройки приложения (кэшируются на процесс)"""
    return Settings()


settings = get_settings()
