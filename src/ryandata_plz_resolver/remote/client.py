from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Optional

import httpx
from pydantic import TypeAdapter

from ryandata_plz_resolver.core.postal_code import is_valid_plz
from ryandata_plz_resolver.models import Locality, PostalCodeMatch, RyanDataPlzError
from ryandata_plz_resolver.models.errors import PACKAGE_NAME
from ryandata_plz_resolver.remote.config import OpenPlzConfig

logger = logging.getLogger(__name__)

_LOCALITIES = TypeAdapter(list[Locality])


def unwrap_envelope(payload: Any) -> list[Any]:
    """Return the result list from a bare list or a results/data envelope."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("results", "data"):
            if isinstance(payload.get(key), list):
                return payload[key]
    return []


def dedupe_localities(localities: Iterable[Locality]) -> list[Locality]:
    """Drop repeated (name, postal code) pairs, keeping the first occurrence."""
    seen: set[tuple[str, str]] = set()
    unique: list[Locality] = []
    for locality in localities:
        if locality.key in seen:
            continue
        seen.add(locality.key)
        unique.append(locality)
    return unique


def group_by_postal_code(localities: Iterable[Locality]) -> list[PostalCodeMatch]:
    """Collapse localities sharing a code into one match named after the first."""
    first_names: dict[str, str] = {}
    for locality in localities:
        first_names.setdefault(locality.postal_code, locality.name)
    return [PostalCodeMatch(code=code, name=name) for code, name in first_names.items()]


class OpenPlzClient:
    """Async REST client for the OpenPLZ locality endpoint.

    Both lookups return an empty list on any failure unless
    ``raise_errors`` is set, in which case failures other than 404
    raise RyanDataPlzError.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        raise_errors: Optional[bool] = None,
        config: Optional[OpenPlzConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or OpenPlzConfig()
        self.base_url = base_url or self._config.base_url
        self._timeout = self._config.timeout if timeout is None else timeout
        self._raise_errors = self._config.raise_errors if raise_errors is None else raise_errors

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self._timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> OpenPlzClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def _fetch_localities(self, params: dict[str, Any]) -> list[Locality]:
        try:
            response = await self._client.get("/Localities", params=params)
        except httpx.HTTPError as exc:
            raise RyanDataPlzError(
                "remote_request",
                str(exc),
                {"package": PACKAGE_NAME},
            ) from exc

        if response.status_code == 404:
            return []
        if response.status_code >= 400:
            raise RyanDataPlzError(
                "remote_http_error",
                f"{response.status_code}: {response.text}",
                {"package": PACKAGE_NAME, "status": response.status_code},
            )

        try:
            return _LOCALITIES.validate_python(unwrap_envelope(response.json()))
        except ValueError as exc:
            raise RyanDataPlzError(
                "remote_parse",
                f"Invalid locality payload: {exc}",
                {"package": PACKAGE_NAME},
            ) from exc

    def _failed(self, subject: str, exc: RyanDataPlzError) -> list[Any]:
        logger.warning("OpenPLZ %s lookup failed: %s", subject, exc.message())
        if self._raise_errors:
            raise RyanDataPlzError.lookup_failure(subject, exc.message()) from exc
        return []

    async def resolve_localities_by_name(
        self,
        name: str,
        postal_code_hint: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> list[Locality]:
        """Find localities by name, optionally scoped to a postal code.

        The service matches substrings, so callers wanting an exact
        match must filter the result themselves.
        """
        if not name or not name.strip():
            return []

        params: dict[str, Any] = {"name": name}
        if postal_code_hint and postal_code_hint.strip():
            params["postalCode"] = postal_code_hint
        if page is not None:
            params["page"] = page
        if page_size is not None:
            params["pageSize"] = page_size

        try:
            localities = await self._fetch_localities(params)
        except RyanDataPlzError as exc:
            return self._failed("locality", exc)

        logger.debug("OpenPLZ returned %d localities for %r", len(localities), name)
        return dedupe_localities(localities)

    async def resolve_postal_codes_by_code(self, code: str) -> list[PostalCodeMatch]:
        """Find the locality names that use a five-digit postal code."""
        if not is_valid_plz(code):
            return []

        try:
            localities = await self._fetch_localities({"postalCode": code})
        except RyanDataPlzError as exc:
            return self._failed("postal code", exc)

        logger.debug("OpenPLZ returned %d localities for code %s", len(localities), code)
        return group_by_postal_code(localities)
