import os
import logging
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_ICON_CLASS_TOKENS = ["icon", "fa-", "glyph", "symbol", "material", "ld-"]


class AuditSettings(BaseModel):
    # Empirical heuristics, not ARIA requirements: tune per site
    icon_text_threshold: int = Field(2, description="Icon-font candidates with more rendered text than this are treated as real text")
    icon_class_tokens: List[str] = Field(default_factory=lambda: list(DEFAULT_ICON_CLASS_TOKENS), description="Case-insensitive class fragments that mark a <span> as an icon")
    fetch_timeout: float = Field(30.0, description="Seconds to wait when fetching a page over HTTP")
    highlight_ms: int = Field(1500, description="How long a highlighted element keeps its outline in a live page")
    batch_concurrency: int = Field(3, description="Pages audited at once by the batch endpoint")


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        logger.warning(f"Ignoring malformed {name}={raw!r}, using default {default}")
        return default


def load_settings() -> AuditSettings:
    """Builds settings from the environment (and .env, if present)."""
    load_dotenv()

    tokens = DEFAULT_ICON_CLASS_TOKENS
    raw_tokens = os.getenv("ARIA_AUDIT_ICON_CLASS_TOKENS")
    if raw_tokens:
        parsed = [t.strip() for t in raw_tokens.split(",") if t.strip()]
        if parsed:
            tokens = parsed

    return AuditSettings(
        icon_text_threshold=_env_number("ARIA_AUDIT_ICON_TEXT_THRESHOLD", 2, int),
        icon_class_tokens=list(tokens),
        fetch_timeout=_env_number("ARIA_AUDIT_FETCH_TIMEOUT", 30.0, float),
        highlight_ms=_env_number("ARIA_AUDIT_HIGHLIGHT_MS", 1500, int),
        batch_concurrency=max(1, _env_number("ARIA_AUDIT_BATCH_CONCURRENCY", 3, int)),
    )
