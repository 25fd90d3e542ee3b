"""Bidirectional locality / postal code resolution.

AddressFormSession owns the state of one address form. Each field feeds
a debounce barrier; once a value settles the field's flow looks it up
and writes the result into the *other* field. Such cross-field writes
arm a single-use EchoToken so they do not bounce back as a lookup.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine, Iterable
from typing import Any, Optional

from abstract_validation_base import ProcessEntry, ProcessLog

from ryandata_plz_resolver.core.postal_code import validate_plz
from ryandata_plz_resolver.debounce import Debouncer
from ryandata_plz_resolver.models import (
    COMMIT_KEY,
    EchoToken,
    FieldState,
    FormField,
    FormView,
    Locality,
    RyanDataPlzError,
    UiState,
)
from ryandata_plz_resolver.projector import project_view
from ryandata_plz_resolver.protocols import LookupClientProtocol
from ryandata_plz_resolver.remote.config import OpenPlzConfig
from ryandata_plz_resolver.validation import PostalCodeFormatValidator

logger = logging.getLogger(__name__)


def exact_matches(query: str, localities: Iterable[Locality]) -> list[Locality]:
    """Keep localities whose trimmed name equals *query*, ignoring case.

    The lookup service also returns substring matches ("Mü" finds
    "Münster"); those must not resolve the field.
    """
    wanted = query.strip().lower()
    return [loc for loc in localities if loc.name.strip().lower() == wanted]


class AddressFormSession:
    """Resolution engine and field state for a single address form.

    Create one per form; close it with ``aclose()`` or use it as an async
    context manager. Edit handlers are synchronous but must be called from
    a running event loop because they start debounce timers.

    Example:
        async with OpenPlzClient() as client:
            async with AddressFormSession(client) as session:
                session.edit_locality("Berlin")
                await session.settle()
                print(session.view().postal_code)  # "10115"
    """

    def __init__(
        self,
        client: LookupClientProtocol,
        *,
        config: Optional[OpenPlzConfig] = None,
        debounce_delay: Optional[float] = None,
        page_size: Optional[int] = None,
    ) -> None:
        self._client = client
        self._config = config or OpenPlzConfig()
        delay = self._config.debounce_delay if debounce_delay is None else debounce_delay
        self._page_size = self._config.page_size if page_size is None else page_size

        self.fields = FieldState()
        self.ui = UiState()
        self.process_log = ProcessLog()

        self._format_validator = PostalCodeFormatValidator()
        self._locality_echo: Optional[EchoToken] = None
        self._postal_echo: Optional[EchoToken] = None
        self._locality_seq = 0
        self._postal_seq = 0
        self._tasks: set[asyncio.Task[None]] = set()
        self._locality_debounce = Debouncer(delay, self._on_locality_settled)
        self._postal_debounce = Debouncer(delay, self._on_postal_code_settled)

    async def __aenter__(self) -> AddressFormSession:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Drop pending debounce timers and cancel running flows."""
        self._locality_debounce.cancel()
        self._postal_debounce.cancel()
        tasks = set(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.wait(tasks)

    # ── Direct edit handlers ──────────────────────────────────────

    def edit_locality(self, value: str) -> None:
        """The user typed in the locality field."""
        self.fields.locality_value = value
        self.fields.locality_touched = True
        self.ui.error_message = ""
        self._locality_echo = None
        # Typing invalidates any earlier disambiguation
        if value:
            self._collapse_dropdown()
        self._locality_debounce.push(value)

    def edit_postal_code(self, value: str) -> None:
        """The user typed in the free-text postal code field."""
        self.fields.postal_code_value = value
        self.fields.postal_code_touched = True
        self.ui.error_message = ""
        self._postal_echo = None
        if value and not self.ui.dropdown_mode:
            self._write_locality("", "postal code edited")
        self._postal_debounce.push(value)

    def select_postal_code(self, code: str) -> None:
        """The user picked an option from the postal code dropdown.

        ``""`` is the "Select a postal code" placeholder. Outside
        dropdown mode this is an ordinary free-text edit.

        Raises:
            ValueError: If *code* is not one of the offered options.
        """
        if not self.ui.dropdown_mode:
            self.edit_postal_code(code)
            return
        if code and code not in self.ui.postal_code_options:
            available = ", ".join(self.ui.postal_code_options)
            raise ValueError(f"Unknown postal code option: {code}. Available options: {available}")

        self.fields.postal_code_value = code
        self.fields.postal_code_touched = True
        self.ui.error_message = ""
        self._postal_echo = EchoToken(code)
        self._postal_debounce.push(code)

    def blur_locality(self) -> None:
        """The locality field lost focus."""
        if self.fields.locality_touched:
            return
        self.fields.locality_touched = True
        self._spawn(self.run_locality_flow(self._locality_debounce.value))

    def blur_postal_code(self) -> None:
        """The postal code field lost focus."""
        if self.fields.postal_code_touched:
            return
        self.fields.postal_code_touched = True
        self._spawn(self.run_postal_code_flow(self._postal_debounce.value))

    @staticmethod
    def handle_key(key: str) -> bool:
        """Return True if the key's default action must be prevented.

        The form has no submit action, so the commit key is swallowed.
        State is never changed.
        """
        return key == COMMIT_KEY

    # ── Resolution flows ──────────────────────────────────────────

    async def run_locality_flow(self, debounced: str) -> None:
        """Resolve a settled locality name into postal code state."""
        if not self.fields.locality_touched:
            return
        self._locality_seq += 1
        seq = self._locality_seq

        token, self._locality_echo = self._locality_echo, None
        if token is not None and token.matches(debounced):
            logger.debug("Ignoring echo of programmatic locality write %r", debounced)
            return

        query = debounced.strip()
        if not query:
            self._collapse_dropdown()
            if self.fields.postal_code_touched:
                self._write_postal_code("", "locality cleared")
            # Re-checked against the live value: a stale error stays while
            # the user is still typing
            if not self.fields.locality_value.strip():
                self.ui.error_message = ""
            return

        self.ui.is_loading = True
        self.ui.error_message = ""
        try:
            localities = await self._client.resolve_localities_by_name(
                query, page=1, page_size=self._page_size
            )
        except Exception as exc:
            logger.warning("Locality lookup for %r failed: %s", query, exc)
            if seq == self._locality_seq:
                self._fail(
                    FormField.LOCALITY, RyanDataPlzError.lookup_failure("locality", str(exc)), query
                )
            return
        finally:
            self.ui.is_loading = False

        if seq != self._locality_seq:
            logger.debug("Discarding stale locality result for %r", query)
            return
        self._apply_localities(debounced, localities)

    async def run_postal_code_flow(self, debounced: str) -> None:
        """Resolve a settled postal code into a locality name."""
        if not self.fields.postal_code_touched:
            return
        self._postal_seq += 1
        seq = self._postal_seq

        token, self._postal_echo = self._postal_echo, None
        if token is not None and token.matches(debounced):
            logger.debug("Ignoring echo of programmatic postal code write %r", debounced)
            return

        if not debounced.strip():
            self.ui.error_message = ""
            return

        # No trimming: padded codes are malformed too
        code = debounced
        if not self._format_validator.validate(code).is_valid:
            self._fail(FormField.POSTAL_CODE, RyanDataPlzError.invalid_format(code), code)
            self._write_locality("", "postal code malformed")
            return

        self.ui.is_loading = True
        self.ui.error_message = ""
        try:
            matches = await self._client.resolve_postal_codes_by_code(code)
        except Exception as exc:
            logger.warning("Postal code lookup for %s failed: %s", code, exc)
            if seq == self._postal_seq:
                self._fail(
                    FormField.POSTAL_CODE,
                    RyanDataPlzError.lookup_failure("postal code", str(exc)),
                    code,
                )
            return
        finally:
            self.ui.is_loading = False

        if seq != self._postal_seq:
            logger.debug("Discarding stale postal code result for %s", code)
            return

        if not matches:
            self._fail(FormField.POSTAL_CODE, RyanDataPlzError.invalid_postal_code(code), code)
            self._write_locality("", "postal code unknown")
            return

        self._write_locality(matches[0].name, f"resolved from {code}")
        self.ui.error_message = ""

    def _apply_localities(self, typed: str, localities: list[Locality]) -> None:
        query = typed.strip()
        matches = exact_matches(query, localities)
        if not matches:
            self._collapse_dropdown()
            self._write_postal_code("", f"{query} not found")
            self._fail(FormField.LOCALITY, RyanDataPlzError.not_a_locality(typed), typed)
            return

        codes = list(dict.fromkeys(loc.postal_code for loc in matches))
        if len(codes) == 1:
            self._write_postal_code(codes[0], f"resolved from {query}")
            self._collapse_dropdown()
            self.ui.error_message = ""
            return

        self.ui.postal_code_options = codes
        self.ui.dropdown_mode = True
        # Keep an earlier choice that is still valid
        if self.fields.postal_code_value not in codes:
            self._write_postal_code("", f"{query} has several postal codes")

    # ── Waiting ───────────────────────────────────────────────────

    def flush(self) -> None:
        """Settle both debounce barriers now instead of after the delay."""
        self._locality_debounce.flush()
        self._postal_debounce.flush()

    async def settle(self) -> None:
        """Wait until no debounce timer is pending and no flow is running."""
        while True:
            await self._locality_debounce.wait()
            await self._postal_debounce.wait()
            if self._tasks:
                await asyncio.wait(set(self._tasks))
                continue
            if not (self._locality_debounce.pending or self._postal_debounce.pending):
                return

    # ── Views ─────────────────────────────────────────────────────

    def view(self) -> FormView:
        """Project the current state for rendering."""
        return project_view(self.fields, self.ui)

    def audit_log(self) -> list[dict[str, Any]]:
        """Export programmatic writes and surfaced errors, sorted by timestamp."""
        entries = [entry.model_dump() for entry in self.process_log.cleaning]
        entries.extend(entry.model_dump() for entry in self.process_log.errors)
        return sorted(entries, key=lambda x: x.get("timestamp", ""))

    # ── Private helpers ───────────────────────────────────────────

    def _on_locality_settled(self, value: str) -> None:
        self._spawn(self.run_locality_flow(value))

    def _on_postal_code_settled(self, value: str) -> None:
        self._spawn(self.run_postal_code_flow(value))

    def _spawn(self, flow: Coroutine[Any, Any, None]) -> None:
        task = asyncio.get_running_loop().create_task(flow)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _collapse_dropdown(self) -> None:
        self.ui.dropdown_mode = False
        self.ui.postal_code_options = []

    def _write_postal_code(self, value: str, reason: str) -> None:
        previous = self.fields.postal_code_value
        if value == previous:
            return
        self.fields.postal_code_value = value
        self._postal_echo = EchoToken(value)
        self._postal_debounce.push(value)
        self._record_write(FormField.POSTAL_CODE, previous, value, reason)

    def _write_locality(self, value: str, reason: str) -> None:
        previous = self.fields.locality_value
        if value == previous:
            return
        self.fields.locality_value = value
        self._locality_echo = EchoToken(value)
        self._locality_debounce.push(value)
        self._record_write(FormField.LOCALITY, previous, value, reason)

    def _record_write(self, field: FormField, previous: str, value: str, reason: str) -> None:
        self.process_log.cleaning.append(
            ProcessEntry(
                entry_type="cleaning",
                field=field.value,
                message=reason,
                original_value=previous,
                new_value=value,
                context={"operation_type": "resolution"},
            )
        )

    def _fail(self, field: FormField, error: RyanDataPlzError, value: str) -> None:
        message = error.message()
        self.ui.error_message = message
        self.process_log.errors.append(
            ProcessEntry(
                entry_type="error",
                field=field.value,
                message=message,
                original_value=value,
                context={"error_type": error.type},
            )
        )


async def check_agreement(client: LookupClientProtocol, locality: str, postal_code: str) -> bool:
    """Check that a locality name and a postal code belong together.

    Surrounding whitespace is ignored. Malformed postal codes and blank
    names fail without a lookup.
    """
    name = locality.strip()
    code, _ = validate_plz(postal_code)
    if not name or code is None:
        return False
    candidates = await client.resolve_localities_by_name(name, code)
    return any(loc.postal_code == code for loc in exact_matches(name, candidates))
