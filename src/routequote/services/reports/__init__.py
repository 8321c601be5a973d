"""Quote run manifest helpers."""

from .manifest import list_quote_runs, resolve_export_file

__all__ = ["list_quote_runs", "resolve_export_file"]
