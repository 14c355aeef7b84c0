"""
History API endpoint - what was recorded on a given day.
"""

from datetime import date
from fastapi import APIRouter, Depends

from ..config import settings
from ..core import RecordManager
from ..models import DayHistory
from ..utils.dates import parse_date_key
from .deps import get_records

router = APIRouter(prefix="/history", tags=["history"])


@router.get("/{date_key}", response_model=DayHistory)
async def get_day_history(date_key: str, records: RecordManager = Depends(get_records)):
    """
    Metrics, prediction and to-do list for one date.
    The date must fall between history_start_date (2020-01-01 by default) and today.
    Parts that were never recorded are null.
    """
    key = parse_date_key(date_key, earliest=settings.history_start_date, latest=date.today())
    return await records.get_day_history(key)
