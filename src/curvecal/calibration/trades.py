"""
Calibration trades.

Defines the instruments used to calibrate curves:
- DepositTrade: Simple-interest deposit from today to maturity
- FraTrade: Forward rate agreement over [start, end]
- SwapTrade: Fixed-for-floating swap, single-curve

Trades are immutable value objects expressed in year fractions; dates, day
counts and schedule conventions are resolved before they get here. Each
trade knows its quote and the curves it depends on; pricing lives in
measures.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from ..errors import InvalidArgumentError


@dataclass(frozen=True)
class CalibrationTrade(ABC):
    """
    Abstract base for calibration instruments; only subclasses are priced.

    Attributes:
        rate: Quoted market rate (decimal)
        curve: Name of the curve used for discounting and forwarding

    Subclasses add their own times and an optional ``label`` for reports.
    """
    rate: float
    curve: str

    @property
    @abstractmethod
    def maturity_time(self) -> float:
        """Last time the trade depends on, in years."""
        pass

    @property
    def quote(self) -> float:
        return self.rate


@dataclass(frozen=True)
class DepositTrade(CalibrationTrade):
    """
    Money market deposit.

    The depositor receives (1 + R * tau) at maturity.
    Par rate: R = (1 / DF(T) - 1) / T
    """
    maturity: float = 0.0
    label: str = ""

    def __post_init__(self):
        if not self.maturity > 0:
            raise InvalidArgumentError(f"Deposit maturity must be positive, got {self.maturity}")

    @property
    def maturity_time(self) -> float:
        return self.maturity


@dataclass(frozen=True)
class FraTrade(CalibrationTrade):
    """
    Forward rate agreement.

    Par rate: F = (DF(t1) / DF(t2) - 1) / (t2 - t1)
    """
    start: float = 0.0
    end: float = 0.0
    label: str = ""

    def __post_init__(self):
        if self.start < 0 or not self.end > self.start:
            raise InvalidArgumentError(
                f"FRA needs 0 <= start < end, got start={self.start}, end={self.end}"
            )

    @property
    def maturity_time(self) -> float:
        return self.end


@dataclass(frozen=True)
class SwapTrade(CalibrationTrade):
    """
    Single-curve fixed-for-floating swap.

    Fixed leg pays at ``frequency`` payments per year, the last one at
    maturity; a short first period absorbs any remainder.
    Par rate: R = (1 - DF(Tn)) / sum(delta_i * DF(Ti))
    """
    maturity: float = 0.0
    frequency: int = 1
    label: str = ""

    def __post_init__(self):
        if not self.maturity > 0:
            raise InvalidArgumentError(f"Swap maturity must be positive, got {self.maturity}")
        if self.frequency < 1:
            raise InvalidArgumentError(f"Swap frequency must be at least 1, got {self.frequency}")

    @property
    def maturity_time(self) -> float:
        return self.maturity

    def payment_schedule(self) -> List[Tuple[float, float]]:
        """
        Fixed leg payment times with accrual fractions.

        Returns:
            List of (payment_time, accrual_fraction), rolled back from maturity
        """
        period = 1.0 / self.frequency
        times = []
        t = self.maturity
        while t > 1e-9:
            times.append(t)
            t -= period
        times = np.array(times[::-1])
        accruals = np.diff(np.concatenate(([0.0], times)))
        return list(zip(times.tolist(), accruals.tolist()))


__all__ = [
    "CalibrationTrade",
    "DepositTrade",
    "FraTrade",
    "SwapTrade",
]
