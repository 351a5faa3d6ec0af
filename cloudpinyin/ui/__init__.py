"""User interface components."""

from .lookup_window import CloudLookupWindow

__all__ = ["CloudLookupWindow"]
