"""Core module - validation, domain errors and per-user records."""

from .errors import HealthLinkError, ValidationError, GenerationError, PersistenceError, FieldViolation
from .schema_validator import validate_shape, ensure_valid, ShapeResult
from .record_manager import RecordManager

__all__ = [
    'HealthLinkError', 'ValidationError', 'GenerationError', 'PersistenceError', 'FieldViolation',
    'validate_shape', 'ensure_valid', 'ShapeResult', 'RecordManager',
]
