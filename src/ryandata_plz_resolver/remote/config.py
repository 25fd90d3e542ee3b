from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_flag(name: str, default: str = "1") -> bool:
    value = os.getenv(name, default)
    return value.lower() not in {"0", "false", "no"}


@dataclass
class OpenPlzConfig:
    """Configuration for the OpenPLZ lookup service and the form engine."""

    base_url: str = field(
        default_factory=lambda: os.getenv("RYANDATA_PLZ_API_URL", "https://openplzapi.org/de")
    )
    timeout: float = field(
        default_factory=lambda: float(os.getenv("RYANDATA_PLZ_TIMEOUT", "10.0"))
    )
    # Large enough that localities with many codes are not truncated
    page_size: int = field(
        default_factory=lambda: int(os.getenv("RYANDATA_PLZ_PAGE_SIZE", "50"))
    )
    debounce_delay: float = field(
        default_factory=lambda: float(os.getenv("RYANDATA_PLZ_DEBOUNCE", "1.0"))
    )
    raise_errors: bool = field(
        default_factory=lambda: _env_flag("RYANDATA_PLZ_RAISE_ERRORS", "0")
    )
