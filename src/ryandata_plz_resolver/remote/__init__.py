from __future__ import annotations

from ryandata_plz_resolver.remote.client import (
    OpenPlzClient,
    dedupe_localities,
    group_by_postal_code,
    unwrap_envelope,
)
from ryandata_plz_resolver.remote.config import OpenPlzConfig

__all__ = [
    "OpenPlzClient",
    "OpenPlzConfig",
    "dedupe_localities",
    "group_by_postal_code",
    "unwrap_envelope",
]
