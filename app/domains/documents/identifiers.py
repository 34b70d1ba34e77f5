"""Проверка и форматирование идентификаторов SIREN/SIRET."""
import re

from app.core.errors import InvalidIdentifier

# Только ASCII-цифры: \d в Python принимает и прочие цифры Unicode
_SIREN_RE = re.compile(r"[0-9]{9}")
_SIRET_RE = re.compile(r"[0-9]{14}")
_WHITESPACE_RE = re.compile(r"\s+")

PRINCIPAL_ESTABLISHMENT_NIC = "00001"


def clean_identifier(value: str) -> str:
    """Удаление пробелов из идентификатора ("552 032 534" -> "552032534")"""
    return _WHITESPACE_RE.sub("", value)


def validate_siren(value) -> bool:
    return isinstance(value, str) and _SIREN_RE.fullmatch(value) is not None


def validate_siret(value) -> bool:
    return isinstance(value, str) and _SIRET_RE.fullmatch(value) is not None


def derive_default_siret(siren: str) -> str:
    """SIRET головного заведения по SIREN (эвристика: NIC 00001)"""
    if not validate_siren(siren):
        raise InvalidIdentifier(f"SIREN must be exactly 9 digits: {siren!r}")
    return f"{siren}{PRINCIPAL_ESTABLISHMENT_NIC}"


def format_siret_spaced(siret: str) -> str:
    """SIRET в виде XXX XXX XXX XXXXX, как ожидает INSEE"""
    if not validate_siret(siret):
        raise InvalidIdentifier(f"SIRET must be exactly 14 digits: {siret!r}")
    return f"{siret[0:3]} {siret[3:6]} {siret[6:9]} {siret[9:14]}"


def siret_matches_siren(siret: str, siren: str) -> bool:
    return siret[:9] == siren
