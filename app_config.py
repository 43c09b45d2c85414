from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

import httpx
from dotenv import load_dotenv

from configuration_state import MAX_UNITS, MIN_UNITS, ConfigurationError
from pricing_engine import GST_RATE, PricingError, with_tax

SettingReader = Callable[[str], str]


@dataclass(frozen=True)
class AppConfig:
    max_units: int = MAX_UNITS
    tax_rate: str = str(GST_RATE)
    company_name: str = "Smart Home Automation"
    export_url: Optional[str] = None
    export_timeout_s: float = 3.0
    debug_log_path: Optional[str] = None


def _as_optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def _as_int(value: Optional[str], key: str, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ConfigurationError(f"Missing/invalid config key {key}: expected an integer (got {value!r})") from exc


def _as_float(value: Optional[str], key: str, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError as exc:
        raise ConfigurationError(f"Missing/invalid config key {key}: expected a number (got {value!r})") from exc


def _as_export_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"Missing/invalid config key ORDER_EXPORT_URL: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(f"ORDER_EXPORT_URL must be an absolute http(s) URL (got {value!r})")
    return value


def env_reader(environ: Optional[Mapping[str, str]] = None) -> SettingReader:
    source = os.environ if environ is None else environ

    def read(key: str) -> str:
        return str(source.get(key, "") or "").strip()

    return read


def load_config(read: Optional[SettingReader] = None, *, dotenv_path: Optional[Path] = None) -> AppConfig:
    """
    Build the app configuration.

    Values come from `read` (the Streamlit app passes a secrets-then-env reader); by
    default they come from environment variables after loading `.env` from the
    working directory.
    """
    if read is None:
        load_dotenv(dotenv_path=dotenv_path or (Path.cwd() / ".env"))
        read = env_reader()

    max_units = _as_int(_as_optional_str(read("WIZARD_MAX_UNITS")), "WIZARD_MAX_UNITS", MAX_UNITS)
    if max_units < MIN_UNITS:
        raise ConfigurationError(f"WIZARD_MAX_UNITS must be at least {MIN_UNITS} (got {max_units})")

    tax_rate = _as_optional_str(read("WIZARD_TAX_RATE")) or str(GST_RATE)
    try:
        with_tax(0, tax_rate)
    except PricingError as exc:
        raise ConfigurationError(f"Missing/invalid config key WIZARD_TAX_RATE: {exc}") from exc

    timeout_s = _as_float(_as_optional_str(read("ORDER_EXPORT_TIMEOUT_S")), "ORDER_EXPORT_TIMEOUT_S", 3.0)
    if timeout_s <= 0:
        raise ConfigurationError(f"ORDER_EXPORT_TIMEOUT_S must be positive (got {timeout_s})")

    return AppConfig(
        max_units=max_units,
        tax_rate=tax_rate,
        company_name=_as_optional_str(read("WIZARD_COMPANY_NAME")) or AppConfig.company_name,
        export_url=_as_export_url(_as_optional_str(read("ORDER_EXPORT_URL"))),
        export_timeout_s=timeout_s,
        debug_log_path=_as_optional_str(read("WIZARD_DEBUG_LOG")),
    )
