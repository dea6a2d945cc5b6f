"""Domain-specific exceptions.

Custom exceptions provide better error handling and clearer intent
than generic exceptions.
"""


class FeedFormulatorError(Exception):
    """Base exception for all application errors."""


# ============================================================================
# Calculation Errors
# ============================================================================


class ValidationError(FeedFormulatorError):
    """Raised when a required input is missing or empty."""


class LogicError(FeedFormulatorError):
    """Raised when the ingredient pool cannot be balanced."""


# ============================================================================
# Persistence Errors
# ============================================================================


class PersistenceError(FeedFormulatorError):
    """Base exception for persistence-related errors."""


class FormulationNotFoundError(PersistenceError):
    """Raised when a stored formulation does not exist."""


class InvalidFormulationFileError(PersistenceError):
    """Raised when a stored formulation file is malformed."""


class ExportError(PersistenceError):
    """Raised when export operation fails."""


class CatalogImportError(PersistenceError):
    """Raised when an ingredient catalog file cannot be read."""
