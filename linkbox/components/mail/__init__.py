"""
Mail component - Alias generation, firm address resolution and recipient suggestions.
"""

from .component import (
    FIRM_ROLES,
    alias_for_ops,
    build_preview,
    create_email_autocomplete_options,
    get_display_name_for_email,
    get_incoming_email_addresses,
    is_firm_sender,
    resolve_firm_address,
)
from .models import AutocompleteOption

__all__ = [
    # Entry points
    "alias_for_ops",
    "build_preview",
    "create_email_autocomplete_options",
    "get_display_name_for_email",
    "get_incoming_email_addresses",
    "is_firm_sender",
    "resolve_firm_address",
    # Constants
    "FIRM_ROLES",
    # Models
    "AutocompleteOption",
]
