"""
Domain errors raised by the validator, the flows and the document store.
The API layer maps each of them to an HTTP response in main.py.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


@dataclass
class FieldViolation:
    """A single field-level violation produced by shape validation."""
    field: str
    constraint: str  # required, min, max, enum, type, value
    message: str
    bound: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class HealthLinkError(Exception):
    """Base class for HealthLink domain errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(HealthLinkError):
    """Input failed its declared shape."""

    def __init__(self, violations: List[FieldViolation], message: str = "Invalid input"):
        super().__init__(message)
        self.violations = violations

    @property
    def fields(self) -> List[str]:
        return [v.field for v in self.violations]

    def __str__(self) -> str:
        details = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        return f"{self.message} ({details})" if details else self.message


class GenerationError(HealthLinkError):
    """The LLM call failed or returned a payload that does not fit the output shape."""

    def __init__(
        self,
        flow: str,
        message: str,
        violations: Optional[List[FieldViolation]] = None,
    ):
        super().__init__(message)
        self.flow = flow
        self.violations = violations or []

    def __str__(self) -> str:
        return f"[{self.flow}] {self.message}"


class PersistenceError(HealthLinkError):
    """A document store read or write failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
