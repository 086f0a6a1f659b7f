"""
Curve calibration engine.

Calibrates curve node values so that trades reprice to their quotes:
1. Build a CurveProviderGenerator from curve definitions
2. Wrap trades, measures and generator in a CalibrationValue
3. Solve CalibrationValue(x) = 0 with the Broyden root finder
4. Report the calibrated provider and per-trade residuals

Independent calibrations share no mutable state and can be run in parallel
with ``calibrate_many``.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from ..curves.provider import CurveDefinition, CurveProvider, CurveProviderGenerator
from ..errors import InvalidArgumentError
from ..math.functions import to_vector
from ..math.rootfinding.broyden import BroydenVectorRootFinder, RootFinderResult
from .measures import CalibrationMeasures
from .trades import CalibrationTrade
from .value import CalibrationValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalibrationResult:
    """Result of a curve calibration."""
    provider: CurveProvider
    parameters: np.ndarray
    root_result: RootFinderResult
    trades: tuple
    residuals: np.ndarray

    @property
    def iterations(self) -> int:
        return self.root_result.iterations

    @property
    def residual_norm(self) -> float:
        return self.root_result.residual_norm

    def curve(self, name: str):
        """Calibrated curve by name."""
        return self.provider.curve(name)

    def residual_report(self) -> pd.DataFrame:
        """
        Per-trade calibration residuals.

        Returns:
            DataFrame with columns [label, trade_type, curve, maturity, quote, residual]
        """
        rows = []
        for trade, residual in zip(self.trades, self.residuals):
            rows.append({
                'label': getattr(trade, 'label', ''),
                'trade_type': type(trade).__name__,
                'curve': trade.curve,
                'maturity': trade.maturity_time,
                'quote': trade.quote,
                'residual': float(residual),
            })
        return pd.DataFrame(rows, columns=['label', 'trade_type', 'curve', 'maturity', 'quote', 'residual'])


@dataclass(frozen=True)
class CalibrationJob:
    """Inputs of one independent calibration run."""
    trades: Sequence[CalibrationTrade]
    definitions: Sequence[CurveDefinition]
    initial_guess: Optional[Sequence[float]] = None


class CurveCalibrator:
    """
    Calibrate curves to market quotes.

    Attributes:
        root_finder: Vector root finder (Broyden with SVD initialization by default)
        measures: Measure strategy (par spread by default)
    """

    def __init__(
        self,
        root_finder: Optional[BroydenVectorRootFinder] = None,
        measures=None,
    ):
        self.root_finder = root_finder if root_finder is not None else BroydenVectorRootFinder()
        self.measures = measures if measures is not None else CalibrationMeasures.par_spread()

    def calibrate(
        self,
        trades: Sequence[CalibrationTrade],
        definitions: Sequence[CurveDefinition],
        initial_guess: Optional[Sequence[float]] = None,
    ) -> CalibrationResult:
        """
        Calibrate curve node values to trades.

        Args:
            trades: Calibration trades, one per curve node
            definitions: Curves to calibrate, in parameter-vector order
            initial_guess: Starting node values; defaults to the quoted rates

        Returns:
            CalibrationResult with the calibrated provider

        Raises:
            InvalidArgumentError: Inconsistent trades, definitions or guess
            NumericalFailureError: Singular Jacobian or stalled update
            NonConvergenceError: Root finder exhausted its iterations
        """
        if not trades:
            raise InvalidArgumentError("No trades provided")
        trades = tuple(trades)
        generator = CurveProviderGenerator(definitions)
        n = generator.parameter_count
        if len(trades) != n:
            raise InvalidArgumentError(
                f"Calibration needs one trade per parameter: {len(trades)} trades, {n} parameters"
            )

        if initial_guess is None:
            x0 = np.array([t.quote for t in trades], dtype=np.float64)
        else:
            x0 = to_vector(initial_guess, "initial_guess")
            if x0.size != n:
                raise InvalidArgumentError(f"Initial guess has {x0.size} values, expected {n}")

        value = CalibrationValue(trades, self.measures, generator)
        logger.info(
            f"Calibrating {len(trades)} trades to curves {[d.name for d in generator.definitions]}"
        )

        root = self.root_finder.find_root(value, x0)
        provider = generator.generate(root.x)

        logger.info(
            f"Calibration converged in {root.iterations} iterations, "
            f"max residual {np.max(np.abs(root.residual)):.3e}"
        )
        return CalibrationResult(
            provider=provider,
            parameters=root.x,
            root_result=root,
            trades=trades,
            residuals=root.residual,
        )

    def calibrate_many(
        self,
        jobs: Sequence[CalibrationJob],
        max_workers: Optional[int] = None,
    ) -> List[CalibrationResult]:
        """
        Run independent calibrations in parallel.

        Results are returned in job order. The first failing job's exception
        propagates.
        """
        jobs = list(jobs)
        if not jobs:
            return []

        def run(job: CalibrationJob) -> CalibrationResult:
            return self.calibrate(job.trades, job.definitions, job.initial_guess)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(run, jobs))


__all__ = [
    "CalibrationResult",
    "CalibrationJob",
    "CurveCalibrator",
]
