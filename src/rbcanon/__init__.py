"""rbcanon package root."""

from rbcanon.exceptions import (
    EditConflictError,
    GrammarUnavailableError,
    ParseError,
    RbCanonError,
)

__all__ = [
    "__version__",
    "EditConflictError",
    "GrammarUnavailableError",
    "ParseError",
    "RbCanonError",
]

__version__ = "0.1.0"
