"""
Domain-specific exception hierarchy for the clinic dashboard core.
"""

from typing import Dict, List, Optional


class ClinicDashError(Exception):
    """Base class for all application-level errors."""


class ValidationError(ClinicDashError):
    """
    Raised when input violates the upsert contract.

    ``errors`` maps each failing field to its messages.
    """

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors: Dict[str, List[str]] = errors or {}


class NotFoundError(ClinicDashError):
    """Raised when a referenced doctor or clinic does not exist."""


class StoreUnavailableError(ClinicDashError):
    """Raised when a backing store cannot be read or written."""
