"""
Health API endpoints - predictions, daily health logs and the dashboard.
"""

import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, HTTPException, Depends, status

from ..core import RecordManager, ensure_valid
from ..flows import PredictionFlow
from ..llm import LLMProvider
from ..config import settings
from ..models import HealthMetrics, PredictionResult, PredictionRecord, HealthLog, Dashboard
from ..utils.dates import parse_date_key, today_key
from .deps import get_llm_provider, get_records

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.post("/predictions", response_model=PredictionResult)
async def create_prediction(
    payload: Dict[str, Any] = Body(...),
    records: RecordManager = Depends(get_records),
    llm_provider: Optional[LLMProvider] = Depends(get_llm_provider),
):
    """
    Generate a health prediction from today's metrics.

    The metrics are merged into today's health log and the prediction replaces
    any earlier prediction for today.

    Args:
        payload: heartRate, steps, calories, age, gender, existingConditions

    Returns:
        PredictionResult: prediction, suggestedMedication, doctorReference
    """
    metrics = ensure_valid(HealthMetrics, payload)
    flow = PredictionFlow(llm_provider, temperature=settings.llm_temperature)
    result = await flow.run(metrics)

    date_key = today_key()
    await records.upsert_health_log(date_key, metrics)
    await records.save_prediction(date_key, metrics, result)
    logger.info(
        "Prediction stored",
        extra={"extra_fields": {"user_id": records.user_id, "date": date_key}}
    )
    return result


@router.get("/predictions/{date_key}", response_model=PredictionRecord)
async def get_prediction(date_key: str, records: RecordManager = Depends(get_records)):
    """Get the stored prediction for a date."""
    prediction = await records.get_prediction(parse_date_key(date_key))
    if prediction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No prediction for this date")
    return prediction


@router.get("/health-logs/{date_key}", response_model=HealthLog)
async def get_health_log(date_key: str, records: RecordManager = Depends(get_records)):
    """Get the health log for a date."""
    log = await records.get_health_log(parse_date_key(date_key))
    if log is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No health log for this date")
    return log


@router.get("/dashboard", response_model=Dashboard)
async def get_dashboard(records: RecordManager = Depends(get_records)):
    """Profile name and today's heart rate, steps and calories."""
    return await records.get_dashboard(today_key())
