"""Exception hierarchy for the router."""

from __future__ import annotations


class RouterError(Exception):
    """Base class for all router errors."""


class InputValidationError(RouterError, ValueError):
    """Raised when a request exceeds size limits or is structurally invalid."""


class ConfigError(RouterError):
    """Raised when a configuration document fails to load, parse or validate."""


class CollaboratorError(RouterError):
    """Raised when the tagging/classification service call fails."""


class ClassificationError(RouterError):
    """Raised when a classification request cannot complete."""
