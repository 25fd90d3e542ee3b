import asyncio

import httpx
import pytest

from ryandata_plz_resolver.models import ErrorKind, Locality, RyanDataPlzError
from ryandata_plz_resolver.remote import OpenPlzConfig
from ryandata_plz_resolver.remote.client import (
    OpenPlzClient,
    dedupe_localities,
    group_by_postal_code,
    unwrap_envelope,
)


def _client(handler, **kwargs) -> OpenPlzClient:
    return OpenPlzClient(base_url="http://test/de", transport=httpx.MockTransport(handler), **kwargs)


def _run(coro):
    return asyncio.run(coro)


async def _names(client: OpenPlzClient, name: str) -> list[Locality]:
    async with client:
        return await client.resolve_localities_by_name(name, page=1, page_size=50)


async def _codes(client: OpenPlzClient, code: str):
    async with client:
        return await client.resolve_postal_codes_by_code(code)


def test_localities_sends_query_parameters() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"name": "Berlin", "postalCode": "10115"}])

    result = _run(_names(_client(handler), "Berlin"))

    assert result == [Locality(name="Berlin", postal_code="10115")]
    request = seen[0]
    assert request.url.path == "/de/Localities"
    assert request.url.params["name"] == "Berlin"
    assert request.url.params["page"] == "1"
    assert request.url.params["pageSize"] == "50"
    assert "postalCode" not in request.url.params


def test_localities_passes_postal_code_hint() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    async def scenario() -> None:
        async with _client(handler) as client:
            await client.resolve_localities_by_name("Münster", "48149")

    _run(scenario())
    assert seen[0].url.params["name"] == "Münster"
    assert seen[0].url.params["postalCode"] == "48149"


@pytest.mark.parametrize("key", ["results", "data"])
def test_localities_accepts_envelopes(key: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={key: [{"name": "Dresden", "postalCode": "01067"}]})

    result = _run(_names(_client(handler), "Dresden"))
    assert [loc.postal_code for loc in result] == ["01067"]


def test_localities_ignores_extra_wire_fields() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                {
                    "name": "Berlin",
                    "postalCode": "10115",
                    "municipality": {"key": "11000000", "name": "Berlin"},
                    "federalState": {"key": "11", "name": "Berlin"},
                }
            ],
        )

    result = _run(_names(_client(handler), "Berlin"))
    assert result[0].name == "Berlin"


def test_localities_deduplicates_pairs() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                {"name": "Münster", "postalCode": "48143"},
                {"name": "Münster", "postalCode": "48149"},
                {"name": "Münster", "postalCode": "48143"},
            ],
        )

    result = _run(_names(_client(handler), "Münster"))
    assert [loc.postal_code for loc in result] == ["48143", "48149"]


def test_blank_name_makes_no_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    assert _run(_names(_client(handler), "   ")) == []
    assert seen == []


def test_not_found_is_empty_even_when_raising() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"title": "Not Found"})

    assert _run(_names(_client(handler, raise_errors=True), "Berlin")) == []


def test_server_error_is_empty_by_default() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    assert _run(_names(_client(handler), "Berlin")) == []


def test_server_error_raises_lookup_failure_when_enabled() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    with pytest.raises(RyanDataPlzError) as excinfo:
        _run(_names(_client(handler, raise_errors=True), "Berlin"))

    assert excinfo.value.kind is ErrorKind.LOOKUP_FAILURE
    assert excinfo.value.message() == "Error fetching locality data. Please try again."


def test_transport_error_is_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    assert _run(_codes(_client(handler), "10115")) == []


def test_malformed_payload_is_empty() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>not json</html>")

    assert _run(_names(_client(handler), "Berlin")) == []


def test_payload_missing_fields_raises_when_enabled() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"name": "Berlin"}])

    with pytest.raises(RyanDataPlzError):
        _run(_codes(_client(handler, raise_errors=True), "10115"))


def test_postal_codes_groups_names_by_code() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json=[
                {"name": "Weinbergen", "postalCode": "99998"},
                {"name": "Körner", "postalCode": "99998"},
            ],
        )

    matches = _run(_codes(_client(handler), "99998"))

    assert len(matches) == 1
    assert matches[0].code == "99998"
    assert matches[0].name == "Weinbergen"
    assert dict(seen[0].url.params) == {"postalCode": "99998"}


@pytest.mark.parametrize("code", ["1234", "123456", "1011a", " 10115", ""])
def test_postal_codes_rejects_malformed_without_request(code: str) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    assert _run(_codes(_client(handler), code)) == []
    assert seen == []


def test_unwrap_envelope_shapes() -> None:
    assert unwrap_envelope([1, 2]) == [1, 2]
    assert unwrap_envelope({"results": [1]}) == [1]
    assert unwrap_envelope({"data": [2]}) == [2]
    assert unwrap_envelope({"items": [3]}) == []
    assert unwrap_envelope("nope") == []


def test_group_by_postal_code_keeps_first_seen_order() -> None:
    matches = group_by_postal_code(
        [
            Locality(name="Münster", postal_code="48149"),
            Locality(name="Münster", postal_code="48143"),
            Locality(name="Gievenbeck", postal_code="48149"),
        ]
    )
    assert [(m.code, m.name) for m in matches] == [("48149", "Münster"), ("48143", "Münster")]


def test_dedupe_keeps_same_name_with_different_codes() -> None:
    items = [
        Locality(name="Hamburg", postal_code="20095"),
        Locality(name="Hamburg", postal_code="20097"),
        Locality(name="Hamburg", postal_code="20095"),
    ]
    assert dedupe_localities(items) == items[:2]


def test_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("RYANDATA_PLZ_API_URL", "http://plz.local/de")
    monkeypatch.setenv("RYANDATA_PLZ_PAGE_SIZE", "20")
    monkeypatch.setenv("RYANDATA_PLZ_DEBOUNCE", "0.25")
    monkeypatch.setenv("RYANDATA_PLZ_RAISE_ERRORS", "true")

    config = OpenPlzConfig()

    assert config.base_url == "http://plz.local/de"
    assert config.page_size == 20
    assert config.debounce_delay == 0.25
    assert config.raise_errors is True


def test_config_defaults(monkeypatch) -> None:
    for name in (
        "RYANDATA_PLZ_API_URL",
        "RYANDATA_PLZ_TIMEOUT",
        "RYANDATA_PLZ_PAGE_SIZE",
        "RYANDATA_PLZ_DEBOUNCE",
        "RYANDATA_PLZ_RAISE_ERRORS",
    ):
        monkeypatch.delenv(name, raising=False)

    config = OpenPlzConfig()

    assert config.base_url == "https://openplzapi.org/de"
    assert config.timeout == 10.0
    assert config.page_size == 50
    assert config.debounce_delay == 1.0
    assert config.raise_errors is False
