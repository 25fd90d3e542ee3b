from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ryandata_plz_resolver.models import Locality, PostalCodeMatch


@runtime_checkable
class LookupClientProtocol(Protocol):
    """Protocol for locality / postal code lookup implementations.

    Implementations return deduplicated lists and signal "nothing found"
    with an empty list. They may raise on transport failures; the form
    engine reports those as lookup failures.
    """

    async def resolve_localities_by_name(
        self,
        name: str,
        postal_code_hint: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> list[Locality]:
        """Find localities by name.

        Args:
            name: Locality name to search for.
            postal_code_hint: Optional postal code to scope the search.
            page: 1-based result page.
            page_size: Number of results per page.

        Returns:
            Localities unique by (name, postal code), in service order.
        """
        ...

    async def resolve_postal_codes_by_code(self, code: str) -> list[PostalCodeMatch]:
        """Find matches for an exact five-digit postal code.

        Args:
            code: Postal code to look up.

        Returns:
            One PostalCodeMatch per distinct code, in service order.
        """
        ...
