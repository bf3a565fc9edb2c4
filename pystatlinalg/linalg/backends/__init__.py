"""
Kernel backends for the linear algebra operations.

Only a CPU backend exists; the selection hook keeps operation code
independent of which kernel library runs underneath.
"""

from typing import Literal

from pystatlinalg.core.protocols import KernelBackend
from pystatlinalg.linalg.backends.cpu import CPUKernelBackend

# Type alias for backend selection
BackendChoice = Literal['auto', 'cpu', 'cpu_lapack']

_CPU_BACKEND = CPUKernelBackend()


def get_backend(choice: BackendChoice = 'auto') -> KernelBackend:
    """
    Return the kernel backend for a selection string.

    Raises:
        ValueError: If the backend name is unknown
    """
    if choice in ('auto', 'cpu', 'cpu_lapack'):
        return _CPU_BACKEND
    raise ValueError(f"Unknown backend: {choice!r}")


__all__ = ["BackendChoice", "CPUKernelBackend", "get_backend"]
