from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional

import typer

from ryandata_plz_resolver.models import FormView, RyanDataPlzError
from ryandata_plz_resolver.remote import OpenPlzClient
from ryandata_plz_resolver.service import AddressFormSession, check_agreement

app = typer.Typer(help="Resolve German localities and postal codes (PLZ) via OpenPLZ.")


@dataclass
class CliSettings:
    base_url: Optional[str] = None
    timeout: Optional[float] = None
    as_json: bool = False


def _make_client(settings: CliSettings) -> OpenPlzClient:
    # Surface transport failures instead of reporting "not found"
    return OpenPlzClient(base_url=settings.base_url, timeout=settings.timeout, raise_errors=True)


async def _resolve(
    settings: CliSettings,
    *,
    locality: Optional[str] = None,
    postal_code: Optional[str] = None,
    select: Optional[str] = None,
) -> FormView:
    async with _make_client(settings) as client:
        async with AddressFormSession(client, debounce_delay=0) as session:
            if locality is not None:
                session.edit_locality(locality)
            if postal_code is not None:
                session.edit_postal_code(postal_code)
            await session.settle()
            if select is not None:
                session.select_postal_code(select)
                await session.settle()
            return session.view()


async def _check(settings: CliSettings, locality: str, postal_code: str) -> bool:
    async with _make_client(settings) as client:
        return await check_agreement(client, locality, postal_code)


def render(view: FormView, *, as_json: bool = False) -> None:
    if as_json:
        typer.echo(json.dumps(view.to_dict(), ensure_ascii=False))
        return

    typer.echo(f"Locality:     {view.locality or '-'}")
    if view.postal_code_widget == "select":
        typer.echo(f"Postal code:  {view.postal_code or '(select one)'}")
        typer.echo(f"Options:      {', '.join(view.postal_code_options)}")
    else:
        typer.echo(f"Postal code:  {view.postal_code or '-'}")
    if view.error_message:
        typer.echo(f"Error: {view.error_message}")
    if view.status_message:
        typer.echo(view.status_message)


def _finish(view: FormView, settings: CliSettings) -> None:
    render(view, as_json=settings.as_json)
    raise typer.Exit(code=1 if view.error_message else 0)


@app.callback()
def main_options(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(  # noqa: B008
        None,
        "--base-url",
        help="OpenPLZ base URL (default: $RYANDATA_PLZ_API_URL or https://openplzapi.org/de).",
    ),
    timeout: Optional[float] = typer.Option(  # noqa: B008
        None,
        "--timeout",
        help="HTTP timeout in seconds.",
    ),
    as_json: bool = typer.Option(  # noqa: B008
        False,
        "--json",
        help="Print the resulting form state as JSON.",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False,
        "--verbose",
        "-v",
        help="Log lookups and discarded results.",
    ),
) -> None:
    """Resolve German localities and postal codes (PLZ) via OpenPLZ."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = CliSettings(base_url=base_url, timeout=timeout, as_json=as_json)


@app.command()
def locality(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Locality (city/town) name."),  # noqa: B008
    select: Optional[str] = typer.Option(  # noqa: B008
        None,
        "--select",
        help="Postal code to pick when the locality has several.",
    ),
) -> None:
    """Type a locality and show the postal code it resolves to."""
    settings: CliSettings = ctx.obj
    try:
        view = asyncio.run(_resolve(settings, locality=name, select=select))
    except ValueError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=2) from exc
    _finish(view, settings)


@app.command()
def plz(
    ctx: typer.Context,
    code: str = typer.Argument(..., help="Five-digit postal code."),  # noqa: B008
) -> None:
    """Type a postal code and show the locality it resolves to."""
    settings: CliSettings = ctx.obj
    view = asyncio.run(_resolve(settings, postal_code=code))
    _finish(view, settings)


@app.command()
def check(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Locality (city/town) name."),  # noqa: B008
    code: str = typer.Argument(..., help="Five-digit postal code."),  # noqa: B008
) -> None:
    """Exit 0 if the locality and postal code belong together, 1 otherwise."""
    settings: CliSettings = ctx.obj
    try:
        agree = asyncio.run(_check(settings, name, code))
    except RyanDataPlzError as exc:
        typer.echo(f"Error: {exc.message()}")
        raise typer.Exit(code=2) from exc

    if agree:
        typer.echo(f"✓ {code} {name}")
        raise typer.Exit(code=0)
    typer.echo(f"✗ {code} is not a postal code of {name}")
    raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
