"""
History Models - everything recorded for one date.
"""

from typing import Optional
from pydantic import BaseModel

from .health import HealthLog, PredictionRecord
from .todo import TodoList


class DayHistory(BaseModel):
    """Metrics, prediction and to-do list stored for a single date."""
    date: str
    metrics: Optional[HealthLog] = None
    prediction: Optional[PredictionRecord] = None
    tasks: Optional[TodoList] = None
