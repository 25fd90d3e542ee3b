"""UI state projection."""

from __future__ import annotations

from ryandata_plz_resolver.models import VALIDATED_MESSAGE, FieldState, FormView, UiState


def is_validated(fields: FieldState, ui: UiState) -> bool:
    """Both fields filled in, nothing loading and no error showing."""
    return (
        not ui.is_loading
        and not ui.error_message
        and bool(fields.locality_value)
        and bool(fields.postal_code_value)
    )


def project_view(fields: FieldState, ui: UiState) -> FormView:
    """Merge field and UI state into the values a form renders directly.

    Pure function: it neither mutates its inputs nor performs lookups.
    """
    validated = is_validated(fields, ui)
    return FormView(
        locality=fields.locality_value,
        postal_code=fields.postal_code_value,
        postal_code_widget="select" if ui.dropdown_mode else "text",
        postal_code_options=tuple(ui.postal_code_options),
        is_loading=ui.is_loading,
        error_message=ui.error_message,
        validated=validated,
        status_message=VALIDATED_MESSAGE if validated else "",
    )
