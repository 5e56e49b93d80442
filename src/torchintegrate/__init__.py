"""torchintegrate: numerical integration of PyTorch callables."""

from . import (
    quadrature,
    root_finding,
)
from .quadrature import *  # noqa: F401,F403
from .quadrature import __all__ as _quadrature_all

__all__ = [
    "quadrature",
    "root_finding",
    *_quadrature_all,
]

__version__ = "0.1.0"
