"""
Calibration package - fit curves to market quotes.

Provides:
- Calibration trades (deposits, FRAs, swaps)
- CalibrationMeasures: par spread and present value measures
- CalibrationValue: residual function for the root finder
- CurveCalibrator: end-to-end calibration, single or batched
"""

from .trades import CalibrationTrade, DepositTrade, FraTrade, SwapTrade
from .measures import CalibrationMeasures
from .value import CalibrationValue
from .calibrator import CalibrationJob, CalibrationResult, CurveCalibrator

__all__ = [
    "CalibrationTrade",
    "DepositTrade",
    "FraTrade",
    "SwapTrade",
    "CalibrationMeasures",
    "CalibrationValue",
    "CalibrationJob",
    "CalibrationResult",
    "CurveCalibrator",
]
