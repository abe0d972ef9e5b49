"""Exceptions raised by the Wohngeld pre-fill package."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class PrefillError(RuntimeError):
    """Base class for pre-fill service errors."""


class FormReadError(PrefillError):
    """The PDF template is missing, unreadable or has no field catalogue."""


class FormWriteError(PrefillError):
    """The filled document could not be persisted."""


class ValidationError(PrefillError):
    """The application data is missing required attributes."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class MalformedValueError(PrefillError, ValueError):
    """A domain value is present but cannot be formatted for the form."""
