"""
Tolerance tiers for numerical validation.

Defines precision expectations for the supported element types:
- FP64 (reference): agreement with an independent NumPy computation
- FP64, ill-conditioned: relaxed for cond > 1e4
- FP32: relaxed for single-precision arithmetic

Used by the test suite and the benchmark script.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import DTypeLike


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance specification for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Double precision: must match a reference computation to machine precision
CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU double precision — matches reference exactly',
)

# Double precision, ill-conditioned problems (cond > 1e4)
CPU_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-6,
    name='cpu_fp64_ill_conditioned',
    description='CPU double precision, ill-conditioned (cond > 1e4)',
)

# Single precision (float32 / complex64 operands)
CPU_FP32 = ToleranceTier(
    rtol=1e-4,
    atol=1e-5,
    name='cpu_fp32',
    description='CPU single precision — statistically equivalent',
)


def select_tolerance(
    dtype: DTypeLike,
    is_ill_conditioned: bool = False,
) -> ToleranceTier:
    """Select appropriate tolerance tier for an element type."""
    if np.finfo(dtype).bits <= 32:
        return CPU_FP32
    if is_ill_conditioned:
        return CPU_FP64_ILL_CONDITIONED
    return CPU_FP64
