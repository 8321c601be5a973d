"""Hub directory and settings collaborators."""

from .hub_client import HubDirectoryClient
from .settings_client import QuoteDefaults, SettingsClient, load_quote_defaults, merge_quote_settings

__all__ = [
    "HubDirectoryClient",
    "SettingsClient",
    "QuoteDefaults",
    "load_quote_defaults",
    "merge_quote_settings",
]
