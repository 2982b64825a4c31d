"""Errors raised by the optimizer. All of them are raised before any search starts."""

from typing import Optional


class OptimizerError(Exception):
    """Base class for optimizer errors."""


class CatalogValidationError(OptimizerError, ValueError):
    """The action catalog or its inputs are malformed."""

    def __init__(self, message: str, action_id: Optional[str] = None):
        super().__init__(message)
        self.action_id = action_id


class RequiredActionError(CatalogValidationError):
    """A required action id is missing from the catalog or not eligible."""
