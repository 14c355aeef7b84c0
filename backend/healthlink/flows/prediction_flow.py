"""
Prediction Flow - health prediction, lifestyle tips and a doctor reference from daily metrics.
"""

from ..models.health import HealthMetrics, PredictionResult
from .base_flow import BaseFlow

PREDICTION_PROMPT = """You are an AI health assistant that provides health predictions, lifestyle tips, and doctor references based on user data.

Based on the following health stats, provide a health prediction, suggest medication/lifestyle tips, and provide a doctor reference.

Heart Rate: {{{heartRate}}}
Steps: {{{steps}}}
Calories: {{{calories}}}
Age: {{{age}}}
Gender: {{{gender}}}
Existing Conditions: {{{existingConditions}}}

Follow these instructions carefully:

1. Make a prediction based on these stats. For example, predict risk of dehydration, overexertion, etc.
2. Suggest medications and lifestyle tips relevant to the prediction. For example, suggest drinking more water if dehydration is predicted, or suggest resting if overexertion is predicted.
3. Provide a doctor reference with a name, specialization, and contact information for a doctor that can help with the prediction.
"""


class PredictionFlow(BaseFlow[HealthMetrics, PredictionResult]):
    """HealthMetrics in, PredictionResult out."""

    name = "healthPrediction"
    prompt_template = PREDICTION_PROMPT
    input_shape = HealthMetrics
    output_shape = PredictionResult
