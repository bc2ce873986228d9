"""
Safety layer for automated swaps.

Guards against misconfigured runs before anything is signed: slippage outside
a sane range, runaway loop settings, and accidental live submission when a
dry run was intended.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


class SafetyViolation(Exception):
    """Raised when swap parameters violate the configured safety rules."""
    pass


@dataclass(frozen=True)
class SafetyConfig:
    """
    Operational boundaries for a swap run.

    Args:
        max_slippage_pct:  slippage must be >= 0 and strictly below this
        max_loop_cycles:   upper bound on bidirectional loop cycles
        min_interval_seconds: shortest allowed wait between loop swaps
        dry_run:           if True, estimate and build but never sign or submit
    """
    max_slippage_pct: Decimal = Decimal("50")
    max_loop_cycles: int = 1000
    min_interval_seconds: int = 0
    dry_run: bool = False

    def validate_slippage(self, slippage_pct: Decimal) -> None:
        slippage = Decimal(str(slippage_pct))
        if slippage < 0:
            raise SafetyViolation(f"Slippage {slippage}% must not be negative.")
        if slippage >= self.max_slippage_pct:
            raise SafetyViolation(
                f"Slippage {slippage}% exceeds the allowed maximum of {self.max_slippage_pct}%."
            )

    def validate_loop(self, cycles: int, interval_seconds: int) -> None:
        if cycles < 1:
            raise SafetyViolation(f"Loop cycles must be at least 1, got {cycles}.")
        if cycles > self.max_loop_cycles:
            raise SafetyViolation(
                f"Loop cycles {cycles} exceed the limit of {self.max_loop_cycles}."
            )
        if interval_seconds < self.min_interval_seconds:
            raise SafetyViolation(
                f"Interval {interval_seconds}s is below the minimum of {self.min_interval_seconds}s."
            )

    def get_status(self) -> dict[str, str | int | bool]:
        return {
            "max_slippage_pct": str(self.max_slippage_pct),
            "max_loop_cycles": self.max_loop_cycles,
            "min_interval_seconds": self.min_interval_seconds,
            "dry_run": self.dry_run,
        }
