"""
Body metrics

BMI is derived from height (cm) and weight (kg):

    bmi = weight / (height / 100) ** 2

Stored profiles keep the value rounded to one decimal; the insight engine
works from the unrounded value so that thresholds are compared exactly.
"""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


def raw_bmi(height_cm: Optional[float], weight_kg: Optional[float]) -> float:
    """
    Unrounded BMI, or 0.0 when height or weight is missing

    Args:
        height_cm: Height in centimetres
        weight_kg: Weight in kilograms

    Returns:
        BMI as float (0.0 if it cannot be computed)
    """
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return 0.0

    height_m = height_cm / 100
    return weight_kg / (height_m * height_m)


def calculate_bmi(height_cm: Optional[float], weight_kg: Optional[float]) -> Optional[float]:
    """
    BMI rounded to one decimal, for storing on the user profile

    Returns:
        Rounded BMI, or None when height or weight is missing
    """
    bmi = raw_bmi(height_cm, weight_kg)
    if bmi == 0.0:
        logger.debug(f"Skipping BMI: height={height_cm}, weight={weight_kg}")
        return None
    return round(bmi, 1)
