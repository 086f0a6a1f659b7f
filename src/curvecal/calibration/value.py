"""
Calibration value function.

Bundles trades, a measure strategy and a provider generator into the
residual function consumed by the root finder:

    x -> provider = generator.generate(x)
      -> [measure(trade, provider) for trade in trades]

The three inputs are captured in a frozen dataclass; every evaluation builds
a fresh provider, so the function is pure and can be evaluated concurrently.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from ..errors import InvalidArgumentError
from ..math.functions import VectorFunction, to_vector
from .trades import CalibrationTrade


def _measure_function(measures):
    func = getattr(measures, "measure", None)
    if func is None and callable(measures):
        func = measures
    if func is None:
        raise InvalidArgumentError(
            f"Measure strategy {measures!r} must expose measure(trade, provider)"
        )
    return func


@dataclass(frozen=True)
class CalibrationValue(VectorFunction):
    """
    Residual function of a curve calibration.

    Attributes:
        trades: Calibration trades, one residual each
        measures: Strategy exposing ``measure(trade, provider) -> float``
        provider_generator: Strategy exposing ``generate(x) -> provider``
    """
    trades: Tuple[CalibrationTrade, ...]
    measures: object
    provider_generator: object

    def __post_init__(self):
        if self.trades is None or len(self.trades) == 0:
            raise InvalidArgumentError("CalibrationValue needs at least one trade")
        if self.measures is None:
            raise InvalidArgumentError("Measure strategy must not be None")
        if self.provider_generator is None or not hasattr(self.provider_generator, "generate"):
            raise InvalidArgumentError("Provider generator must expose generate(parameters)")
        _measure_function(self.measures)
        object.__setattr__(self, "trades", tuple(self.trades))

    @property
    def dimension(self) -> int:
        """Number of residuals (one per trade)."""
        return len(self.trades)

    def evaluate(self, x: Sequence[float]) -> np.ndarray:
        """
        Residual vector for parameter vector x.

        Args:
            x: Curve parameters

        Returns:
            Array with one measure value per trade
        """
        x = to_vector(x, "parameters")
        provider = self.provider_generator.generate(x)
        measure = _measure_function(self.measures)
        return np.array([measure(trade, provider) for trade in self.trades], dtype=np.float64)


__all__ = ["CalibrationValue"]
