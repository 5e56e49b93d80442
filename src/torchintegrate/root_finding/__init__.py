from ._convergence import check_convergence, default_tolerances
from ._exceptions import RootFindingError
from ._newton import newton_polish

__all__ = [
    "check_convergence",
    "default_tolerances",
    "newton_polish",
    "RootFindingError",
]
