import os

from domain.errors import ConfigurationError

# Basic settings helper to read environment configuration.


def _as_int(val: str | None, default: int) -> int:
    if val is None or val.strip() == "":
        return default
    try:
        return int(val)
    except ValueError as exc:
        raise ConfigurationError(f"Expected an integer, got {val!r}") from exc


def _as_float(val: str | None, default: float) -> float:
    if val is None or val.strip() == "":
        return default
    try:
        return float(val)
    except ValueError as exc:
        raise ConfigurationError(f"Expected a number, got {val!r}") from exc


def _as_path(val: str | None) -> str | None:
    if val is None:
        return None
    val = val.strip()
    return val or None


class Settings:
    def __init__(self) -> None:
        self.SITE_URL: str = os.getenv("SITE_URL", "http://localhost:3000").rstrip("/")
        self.PUBLIC_API_URL: str = os.getenv("PUBLIC_API_URL", "http://localhost:8000").rstrip("/")
        self.CARD_FONT_PATH: str | None = _as_path(os.getenv("CARD_FONT_PATH"))
        self.CARD_FONT_BOLD_PATH: str | None = _as_path(os.getenv("CARD_FONT_BOLD_PATH"))
        self.CARD_MONO_FONT_PATH: str | None = _as_path(os.getenv("CARD_MONO_FONT_PATH"))
        self.CARD_BRAND_FONT_PATH: str | None = _as_path(os.getenv("CARD_BRAND_FONT_PATH"))
        self.OG_CACHE_MAX_AGE: int = _as_int(os.getenv("OG_CACHE_MAX_AGE"), 86400)
        self.VIEW_CACHE_MAX_AGE: int = _as_int(os.getenv("VIEW_CACHE_MAX_AGE"), 3600)
        self.RENDER_TIMEOUT_SECONDS: float = _as_float(os.getenv("RENDER_TIMEOUT_SECONDS"), 10.0)

    def validate(self) -> None:
        """Fail fast on values that would break every request."""
        if self.OG_CACHE_MAX_AGE <= 0:
            raise ConfigurationError("OG_CACHE_MAX_AGE must be positive")
        if self.VIEW_CACHE_MAX_AGE <= 0:
            raise ConfigurationError("VIEW_CACHE_MAX_AGE must be positive")
        if self.RENDER_TIMEOUT_SECONDS <= 0:
            raise ConfigurationError("RENDER_TIMEOUT_SECONDS must be positive")


settings = Settings()
