"""Body metrics derived from the user profile"""
from spike_tracker.health.metrics import calculate_bmi, raw_bmi

__all__ = ["calculate_bmi", "raw_bmi"]
