"""
Calibration measures.

A measure maps (trade, curve provider) to the scalar the root finder drives
to zero. Two standard measures are provided:
- par spread: model par rate minus quoted rate
- present value: PV per unit notional of receiving the quoted rate

CalibrationMeasures dispatches on the trade type through an explicit
registry; unsupported trade types raise InvalidArgumentError.
"""

from types import MappingProxyType
from typing import Callable, Dict, Mapping

from ..curves.provider import CurveProvider
from ..errors import InvalidArgumentError
from .trades import CalibrationTrade, DepositTrade, FraTrade, SwapTrade

MeasureFunction = Callable[[CalibrationTrade, CurveProvider], float]


# ---------------------------------------------------------------------------
# Par rates
# ---------------------------------------------------------------------------

def deposit_par_rate(trade: DepositTrade, provider: CurveProvider) -> float:
    """Implied deposit rate: (1 / DF(T) - 1) / T."""
    df = provider.discount_factor(trade.curve, trade.maturity)
    return (1.0 / df - 1.0) / trade.maturity


def fra_par_rate(trade: FraTrade, provider: CurveProvider) -> float:
    """Implied forward rate over [start, end]."""
    return provider.forward_rate(trade.curve, trade.start, trade.end)


def swap_annuity(trade: SwapTrade, provider: CurveProvider) -> float:
    """Fixed leg annuity: sum(delta_i * DF(T_i))."""
    return sum(
        tau * provider.discount_factor(trade.curve, t)
        for t, tau in trade.payment_schedule()
    )


def swap_par_rate(trade: SwapTrade, provider: CurveProvider) -> float:
    """Par swap rate: (1 - DF(Tn)) / annuity."""
    annuity = swap_annuity(trade, provider)
    final_df = provider.discount_factor(trade.curve, trade.maturity)
    return (1.0 - final_df) / annuity


# ---------------------------------------------------------------------------
# Present values (unit notional, receive quoted rate)
# ---------------------------------------------------------------------------

def deposit_present_value(trade: DepositTrade, provider: CurveProvider) -> float:
    """Lend 1 today, receive 1 + R * T at maturity."""
    df = provider.discount_factor(trade.curve, trade.maturity)
    return df * (1.0 + trade.rate * trade.maturity) - 1.0


def fra_present_value(trade: FraTrade, provider: CurveProvider) -> float:
    """Receive fixed R against the forward over [start, end], paid at end."""
    forward = fra_par_rate(trade, provider)
    df_end = provider.discount_factor(trade.curve, trade.end)
    return (trade.rate - forward) * (trade.end - trade.start) * df_end


def swap_present_value(trade: SwapTrade, provider: CurveProvider) -> float:
    """Receive fixed R, pay floating: R * annuity - (1 - DF(Tn))."""
    annuity = swap_annuity(trade, provider)
    final_df = provider.discount_factor(trade.curve, trade.maturity)
    return trade.rate * annuity - (1.0 - final_df)


class CalibrationMeasures:
    """
    Measure strategy dispatching on trade type.

    Attributes:
        name: Measure name for reports
        functions: Read-only mapping of trade type to measure function
    """

    def __init__(self, name: str, functions: Mapping[type, MeasureFunction]):
        if not functions:
            raise InvalidArgumentError("CalibrationMeasures needs at least one measure function")
        self.name = name
        self.functions = MappingProxyType(dict(functions))

    @classmethod
    def par_spread(cls) -> "CalibrationMeasures":
        """Model par rate minus quoted rate."""
        return cls("ParSpread", {
            DepositTrade: lambda trade, p: deposit_par_rate(trade, p) - trade.rate,
            FraTrade: lambda trade, p: fra_par_rate(trade, p) - trade.rate,
            SwapTrade: lambda trade, p: swap_par_rate(trade, p) - trade.rate,
        })

    @classmethod
    def present_value(cls) -> "CalibrationMeasures":
        """Present value per unit notional of receiving the quoted rate."""
        return cls("PresentValue", {
            DepositTrade: deposit_present_value,
            FraTrade: fra_present_value,
            SwapTrade: swap_present_value,
        })

    def value(self, trade: CalibrationTrade, provider: CurveProvider) -> float:
        """
        Compute the measure for one trade.

        Raises:
            InvalidArgumentError: If the trade type has no registered function
        """
        if trade is None or provider is None:
            raise InvalidArgumentError("Trade and provider must not be None")
        func = self.functions.get(type(trade))
        if func is None:
            raise InvalidArgumentError(
                f"Measure '{self.name}' does not support trade type {type(trade).__name__}"
            )
        return float(func(trade, provider))

    def measure(self, trade: CalibrationTrade, provider: CurveProvider) -> float:
        return self.value(trade, provider)

    def __call__(self, trade: CalibrationTrade, provider: CurveProvider) -> float:
        return self.value(trade, provider)

    def supported_types(self) -> Dict[str, type]:
        return {t.__name__: t for t in self.functions}

    def __repr__(self) -> str:
        return f"CalibrationMeasures({self.name!r}, trades={sorted(self.supported_types())})"


__all__ = [
    "MeasureFunction",
    "CalibrationMeasures",
    "deposit_par_rate",
    "fra_par_rate",
    "swap_annuity",
    "swap_par_rate",
    "deposit_present_value",
    "fra_present_value",
    "swap_present_value",
]
