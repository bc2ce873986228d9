"""swap module init"""
from sui_swapper.swap.calculator import (
    compute_limit_price,
    estimate_output,
    estimate_swap,
    from_base_units,
    pool_limit_price,
    to_base_units,
)
from sui_swapper.swap.executor import SwapExecutionError, SwapExecutor
from sui_swapper.swap.planner import (
    InsufficientFundsError,
    SwapInputError,
    SwapInputs,
    SwapPlan,
    plan_swap,
)
from sui_swapper.swap.safety import SafetyConfig, SafetyViolation

__all__ = [
    "InsufficientFundsError",
    "SafetyConfig",
    "SafetyViolation",
    "SwapExecutionError",
    "SwapExecutor",
    "SwapInputError",
    "SwapInputs",
    "SwapPlan",
    "compute_limit_price",
    "estimate_output",
    "estimate_swap",
    "from_base_units",
    "plan_swap",
    "pool_limit_price",
    "to_base_units",
]
