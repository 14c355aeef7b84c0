"""
Health Data Models - daily metrics, predictions and the per-date history view.
"""

from typing import Any, Dict, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator
from pydantic_core import PydanticCustomError

Gender = Literal["male", "female", "other"]


def _integral(value: Optional[float]) -> Optional[Union[int, float]]:
    """Keep whole numbers as ints so they render and store as entered."""
    if value is not None and float(value).is_integer():
        return int(value)
    return value


class HealthMetrics(BaseModel):
    """Metrics submitted on the prediction form."""
    heart_rate: float = Field(
        ..., alias="heartRate", ge=30, le=220, allow_inf_nan=False,
        description="The user heart rate."
    )
    steps: float = Field(
        ..., ge=0, allow_inf_nan=False,
        description="The number of steps the user has taken."
    )
    calories: float = Field(
        ..., ge=0, allow_inf_nan=False,
        description="The number of calories the user has burned."
    )
    age: float = Field(
        ..., ge=1, le=120, allow_inf_nan=False,
        description="The age of the user."
    )
    gender: Gender = Field(..., description="The gender of the user.")
    existing_conditions: Optional[str] = Field(
        None, alias="existingConditions",
        description="Any existing medical conditions the user has."
    )

    @field_validator("heart_rate", "steps", "calories", "age", mode="before")
    @classmethod
    def reject_booleans(cls, value):
        # bool is an int subclass; true/false must not pass as 1/0
        if isinstance(value, bool):
            raise PydanticCustomError("bool_not_number", "Input should be a number, not a boolean")
        return value

    @field_validator("heart_rate", "steps", "calories", "age")
    @classmethod
    def whole_numbers(cls, value):
        return _integral(value)

    class Config:
        populate_by_name = True


class DoctorReference(BaseModel):
    """Reference information for a relevant doctor."""
    name: str = Field(..., description="The name of the doctor.")
    specialization: str = Field(..., description="The specialization of the doctor.")
    contact: str = Field(..., description="The contact information of the doctor.")


class PredictionResult(BaseModel):
    """Output of the prediction flow."""
    prediction: str = Field(..., description="The AI-generated health prediction.")
    suggested_medication: str = Field(
        ..., alias="suggestedMedication",
        description="Suggested medication or lifestyle tips."
    )
    doctor_reference: DoctorReference = Field(
        ..., alias="doctorReference",
        description="Reference information for a relevant doctor."
    )

    class Config:
        populate_by_name = True


class HealthLog(BaseModel):
    """Daily health log document (dailyHealthLogs/{date})."""
    date: str
    heart_rate: Optional[float] = Field(None, alias="heartRate")
    steps: Optional[float] = None
    calories: Optional[float] = None

    @field_validator("heart_rate", "steps", "calories")
    @classmethod
    def whole_numbers(cls, value):
        return _integral(value)

    class Config:
        populate_by_name = True


class PredictionRecord(BaseModel):
    """Stored prediction document (healthPredictions/{date})."""
    input_stats: Dict[str, Any] = Field(..., alias="inputStats")
    prediction_report: str = Field(..., alias="predictionReport")
    suggested_medication: str = Field(..., alias="suggestedMedication")
    doctor_reference: DoctorReference = Field(..., alias="doctorReference")
    timestamp: Optional[str] = None

    class Config:
        populate_by_name = True


class QuickStats(BaseModel):
    """Today's numbers shown on the dashboard."""
    heart_rate: float = Field(0, alias="heartRate")
    steps: float = 0
    calories: float = 0

    @field_validator("heart_rate", "steps", "calories")
    @classmethod
    def whole_numbers(cls, value):
        return _integral(value)

    class Config:
        populate_by_name = True


class Dashboard(BaseModel):
    """Dashboard summary for the signed-in user."""
    name: Optional[str] = None
    date: str
    quick_stats: QuickStats = Field(default_factory=QuickStats, alias="quickStats")

    class Config:
        populate_by_name = True
