"""
Shared compute infrastructure for pystatlinalg.

Submodules:
    timing: Execution timing utilities
    precision: Numerical precision constants and utilities
    tolerances: Tolerance tiers for numerical comparison
"""

from pystatlinalg.core.compute.timing import Timer, timed
from pystatlinalg.core.compute.tolerances import (
    ToleranceTier,
    CPU_FP64,
    CPU_FP64_ILL_CONDITIONED,
    CPU_FP32,
    select_tolerance,
)

__all__ = [
    # Timing
    "Timer",
    "timed",
    # Tolerances
    "ToleranceTier",
    "CPU_FP64",
    "CPU_FP64_ILL_CONDITIONED",
    "CPU_FP32",
    "select_tolerance",
]
