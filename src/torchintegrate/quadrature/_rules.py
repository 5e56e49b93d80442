"""Quadrature rule classes."""

from typing import Callable, Optional, Tuple, Union

import torch
from torch import Tensor

from ._cache import NodeCache
from ._nodes import QuadratureFamily
from ._reduction import weighted_sum
from ._validation import check_interval, check_order, infer_dtype_device


class _GaussRule:
    family: QuadratureFamily

    def __init__(self, n: int, *, cache: Optional[NodeCache] = None):
        self.n = check_order(n)
        self.cache = cache if cache is not None else NodeCache()

    def _base_nodes_weights(
        self,
        dtype: torch.dtype,
        device: Optional[torch.device],
    ) -> Tuple[Tensor, Tensor]:
        return self.cache.get(self.family, self.n, dtype=dtype, device=device)

    def nodes_and_weights(
        self,
        *,
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
    ) -> Tuple[Tensor, Tensor]:
        """
        Return the nodes and weights of the rule on its natural domain.

        Parameters
        ----------
        dtype : torch.dtype
            Output dtype.
        device : torch.device, optional
            Output device.

        Returns
        -------
        nodes, weights : Tensor
            Shape (n,), nodes sorted ascending.
        """
        return self._base_nodes_weights(dtype, device)

    def integrate(
        self,
        f: Callable[[Tensor], Tensor],
        *,
        dtype: torch.dtype = torch.float64,
        device: Optional[torch.device] = None,
    ) -> Tensor:
        """
        Return :math:`\\sum_i w_i f(x_i)` over the rule's nodes.

        The weight function of the family is built into the weights, so
        ``f`` is only the remaining factor of the integrand.
        """
        nodes, weights = self.nodes_and_weights(dtype=dtype, device=device)
        return weighted_sum(f, nodes, weights)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={self.n})"


class GaussLegendre(_GaussRule):
    """
    Gauss-Legendre quadrature rule.

    Exact for polynomials of degree <= 2n-1.

    Parameters
    ----------
    n : int
        Number of quadrature points.
    cache : NodeCache, optional
        Cache to draw the node set from. A private cache is created when
        omitted.

    Examples
    --------
    >>> rule = GaussLegendre(32)
    >>> nodes, weights = rule.nodes_and_weights(a=0, b=1)
    >>> result = rule.integrate(torch.sin, 0, torch.pi)  # approximately 2.0

    Attributes
    ----------
    n : int
        Number of points.
    """

    family = QuadratureFamily.LEGENDRE

    def nodes_and_weights(
        self,
        a: Union[float, Tensor] = -1.0,
        b: Union[float, Tensor] = 1.0,
        *,
        dtype: Optional[torch.dtype] = None,
        device: Optional[torch.device] = None,
    ) -> Tuple[Tensor, Tensor]:
        """
        Return nodes and weights scaled to [a, b].

        Parameters
        ----------
        a, b : float or Tensor
            Scalar integration bounds.
        dtype : torch.dtype, optional
            Output dtype. Inferred from a/b if not specified.
        device : torch.device, optional
            Output device. Inferred from a/b if not specified.

        Returns
        -------
        nodes : Tensor
            Shape (n,).
        weights : Tensor
            Shape (n,).
        """
        inferred_dtype, inferred_device = infer_dtype_device(a, b)
        dtype = dtype or inferred_dtype
        device = device or inferred_device

        a = torch.as_tensor(a, dtype=dtype, device=device)
        b = torch.as_tensor(b, dtype=dtype, device=device)

        base_nodes, base_weights = self._base_nodes_weights(dtype, device)

        # x' = (b - a) / 2 * x + (a + b) / 2, weights scale by (b - a) / 2
        half_width = (b - a) / 2
        center = (a + b) / 2

        return half_width * base_nodes + center, half_width * base_weights

    def integrate(
        self,
        f: Callable[[Tensor], Tensor],
        a: Union[float, Tensor],
        b: Union[float, Tensor],
    ) -> Tensor:
        """
        Integrate f from a to b.

        Parameters
        ----------
        f : callable
            Integrand function. Takes tensor of shape (n,), returns same.
        a, b : float or Tensor
            Integration bounds, ``a < b``.

        Returns
        -------
        Tensor
            Scalar integral value.
        """
        check_interval(a, b)
        nodes, weights = self.nodes_and_weights(a, b)
        return weighted_sum(f, nodes, weights)


class GaussLaguerre(_GaussRule):
    r"""
    Gauss-Laguerre rule for :math:`\int_0^\infty f(x) e^{-x} dx`.

    Parameters
    ----------
    n : int
        Number of quadrature points.
    cache : NodeCache, optional
        Cache to draw the node set from.
    """

    family = QuadratureFamily.LAGUERRE


class GaussHermite(_GaussRule):
    r"""
    Gauss-Hermite rule for :math:`\int_{-\infty}^\infty f(x) e^{-x^2} dx`.

    Parameters
    ----------
    n : int
        Number of quadrature points.
    cache : NodeCache, optional
        Cache to draw the node set from.
    """

    family = QuadratureFamily.HERMITE


class GaussChebyshev(_GaussRule):
    r"""
    Gauss-Chebyshev rule on [-1, 1].

    ``kind=1`` integrates :math:`\int f(x) (1 - x^2)^{-1/2} dx`,
    ``kind=2`` integrates :math:`\int f(x) (1 - x^2)^{1/2} dx`.

    Parameters
    ----------
    n : int
        Number of quadrature points.
    kind : int
        1 or 2.
    cache : NodeCache, optional
        Cache to draw the node set from.
    """

    def __init__(
        self, n: int, kind: int = 1, *, cache: Optional[NodeCache] = None
    ):
        if kind not in (1, 2):
            raise ValueError(f"kind must be 1 or 2, got {kind}")
        super().__init__(n, cache=cache)
        self.kind = kind
        self.family = (
            QuadratureFamily.CHEBYSHEV_FIRST
            if kind == 1
            else QuadratureFamily.CHEBYSHEV_SECOND
        )

    def __repr__(self) -> str:
        return f"GaussChebyshev(n={self.n}, kind={self.kind})"
