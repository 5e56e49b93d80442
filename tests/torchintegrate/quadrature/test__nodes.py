import math
import warnings

import mpmath
import numpy as np
import pytest
import scipy.special
import torch


def assert_symmetric(nodes, weights):
    assert torch.equal(nodes, -nodes.flip(0))
    assert torch.equal(weights, weights.flip(0))


def legendre_reference(n, nodes):
    """Refine double precision nodes of P_n in 40-digit arithmetic"""
    reference_nodes, reference_weights = [], []

    with mpmath.workdps(40):

        def evaluate(x):
            # Three-term recurrence, then P_n' from P_n and P_{n-1}
            previous, current = mpmath.mpf(1), x
            for k in range(1, n):
                previous, current = current, (
                    (2 * k + 1) * x * current - k * previous
                ) / (k + 1)
            return current, n * (x * current - previous) / (x * x - 1)

        for x0 in nodes.tolist():
            x = mpmath.mpf(x0)
            for _ in range(4):
                p, dp = evaluate(x)
                x = x - p / dp
            _, dp = evaluate(x)
            reference_nodes.append(float(x))
            reference_weights.append(float(2 / ((1 - x * x) * dp * dp)))

    return np.array(reference_nodes), np.array(reference_weights)


class TestGaussLegendreNodesWeights:
    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 10, 21, 64, 100])
    def test_matches_reference_polished(self, n):
        """Newton-polished branch against a 40-digit reference"""
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(n)
        half = slice(n // 2, None)
        expected_nodes, expected_weights = legendre_reference(n, nodes[half])

        np.testing.assert_allclose(
            nodes[half].numpy(), expected_nodes, rtol=0, atol=2e-15
        )
        np.testing.assert_allclose(
            weights[half].numpy(), expected_weights, rtol=1e-12
        )

    @pytest.mark.parametrize("n", [101, 150, 257, 400])
    def test_matches_reference_asymptotic(self, n):
        """Iteration-free branch against a 40-digit reference"""
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(n)
        half = slice(n // 2, None)
        expected_nodes, expected_weights = legendre_reference(n, nodes[half])

        np.testing.assert_allclose(
            nodes[half].numpy(), expected_nodes, rtol=0, atol=1e-14
        )
        np.testing.assert_allclose(
            weights[half].numpy(), expected_weights, rtol=1e-11
        )

    def test_outermost_weight_accurate(self):
        """The weight next to x = 1 keeps near full precision"""
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(100)
        _, expected_weights = legendre_reference(100, nodes[-1:])

        assert math.isclose(weights[-1].item(), expected_weights[0], rel_tol=1e-12)

    @pytest.mark.parametrize("n", [10, 64])
    def test_matches_numpy(self, n):
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(n)
        expected_nodes, expected_weights = np.polynomial.legendre.leggauss(n)

        np.testing.assert_allclose(nodes.numpy(), expected_nodes, atol=1e-14)
        np.testing.assert_allclose(weights.numpy(), expected_weights, rtol=1e-11)

    def test_single_point(self):
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(1)

        assert nodes.tolist() == [0.0]
        assert weights.tolist() == [2.0]

    @pytest.mark.parametrize("n", [1, 2, 7, 8, 99, 100, 101, 150, 151])
    def test_symmetric_and_sorted(self, n):
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(n)

        assert nodes.shape == (n,)
        assert weights.shape == (n,)
        assert torch.all(nodes[1:] > nodes[:-1])
        assert torch.all(weights > 0)
        assert_symmetric(nodes, weights)
        if n % 2 == 1:
            assert nodes[n // 2].item() == 0.0

    @pytest.mark.parametrize("n", [3, 8, 20, 200])
    def test_weights_sum_to_two(self, n):
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        _, weights = gauss_legendre_nodes_weights(n)

        assert abs(weights.sum().item() - 2.0) < 1e-13

    @pytest.mark.parametrize("n", [2, 5, 9])
    def test_exact_for_degree_2n_minus_1(self, n):
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(n)

        for k in range(0, 2 * n):
            exact = 2.0 / (k + 1) if k % 2 == 0 else 0.0
            result = (weights * nodes**k).sum().item()
            assert abs(result - exact) < 1e-14

    def test_dtype(self):
        from torchintegrate.quadrature import gauss_legendre_nodes_weights

        nodes, weights = gauss_legendre_nodes_weights(10, dtype=torch.float32)

        assert nodes.dtype == torch.float32
        assert weights.dtype == torch.float32

    @pytest.mark.parametrize("n", [0, -3])
    def test_invalid_order(self, n):
        from torchintegrate.quadrature import (
            InvalidOrder,
            gauss_legendre_nodes_weights,
        )

        with pytest.raises(InvalidOrder):
            gauss_legendre_nodes_weights(n)


class TestGaussLaguerreNodesWeights:
    @pytest.mark.parametrize("n", [1, 2, 3, 5, 10, 20])
    def test_matches_numpy(self, n):
        from torchintegrate.quadrature import gauss_laguerre_nodes_weights

        nodes, weights = gauss_laguerre_nodes_weights(n)
        expected_nodes, expected_weights = np.polynomial.laguerre.laggauss(n)

        np.testing.assert_allclose(nodes.numpy(), expected_nodes, rtol=1e-12)
        np.testing.assert_allclose(weights.numpy(), expected_weights, rtol=1e-9)

    def test_matches_scipy_moderate_order(self):
        from torchintegrate.quadrature import gauss_laguerre_nodes_weights

        nodes, weights = gauss_laguerre_nodes_weights(64)
        expected_nodes, expected_weights = scipy.special.roots_laguerre(64)

        np.testing.assert_allclose(nodes.numpy(), expected_nodes, rtol=1e-12)
        # Compare the weights that carry the integral
        large = expected_weights > 1e-30
        np.testing.assert_allclose(
            weights.numpy()[large], expected_weights[large], rtol=1e-8
        )

    def test_single_point(self):
        from torchintegrate.quadrature import gauss_laguerre_nodes_weights

        nodes, weights = gauss_laguerre_nodes_weights(1)

        torch.testing.assert_close(nodes, torch.tensor([1.0]).double())
        torch.testing.assert_close(weights, torch.tensor([1.0]).double())

    @pytest.mark.parametrize("n", [4, 12])
    def test_moments(self, n):
        """Integral of x^k exp(-x) over [0, inf) is k!"""
        from torchintegrate.quadrature import gauss_laguerre_nodes_weights

        nodes, weights = gauss_laguerre_nodes_weights(n)

        for k in range(0, 2 * n):
            result = (weights * nodes**k).sum().item()
            assert math.isclose(result, math.factorial(k), rel_tol=1e-10)

    @pytest.mark.parametrize("n", [2, 30, 100])
    def test_sorted_positive(self, n):
        from torchintegrate.quadrature import gauss_laguerre_nodes_weights

        nodes, weights = gauss_laguerre_nodes_weights(n)

        assert torch.all(nodes > 0)
        assert torch.all(nodes[1:] > nodes[:-1])
        assert torch.all(weights > 0)
        assert abs(weights.sum().item() - 1.0) < 1e-10

    def test_underflow_warns(self):
        """Smallest weights of a 60-point rule do not fit in float32"""
        from torchintegrate.quadrature import (
            QuadratureWarning,
            gauss_laguerre_nodes_weights,
        )

        with pytest.warns(QuadratureWarning, match="underflow"):
            gauss_laguerre_nodes_weights(60, dtype=torch.float32)

    def test_no_warning_when_representable(self):
        from torchintegrate.quadrature import gauss_laguerre_nodes_weights

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            gauss_laguerre_nodes_weights(10)


class TestGaussHermiteNodesWeights:
    @pytest.mark.parametrize("n", [1, 2, 3, 6, 11, 20, 50])
    def test_matches_numpy(self, n):
        from torchintegrate.quadrature import gauss_hermite_nodes_weights

        nodes, weights = gauss_hermite_nodes_weights(n)
        expected_nodes, expected_weights = np.polynomial.hermite.hermgauss(n)

        np.testing.assert_allclose(nodes.numpy(), expected_nodes, atol=1e-13)
        np.testing.assert_allclose(weights.numpy(), expected_weights, rtol=1e-9)

    def test_single_point(self):
        from torchintegrate.quadrature import gauss_hermite_nodes_weights

        nodes, weights = gauss_hermite_nodes_weights(1)

        assert nodes.tolist() == [0.0]
        assert math.isclose(weights.item(), math.sqrt(math.pi), rel_tol=1e-15)

    @pytest.mark.parametrize("n", [1, 2, 9, 10, 101])
    def test_symmetric(self, n):
        from torchintegrate.quadrature import gauss_hermite_nodes_weights

        nodes, weights = gauss_hermite_nodes_weights(n)

        assert torch.all(nodes[1:] > nodes[:-1])
        assert_symmetric(nodes, weights)
        assert abs(weights.sum().item() - math.sqrt(math.pi)) < 1e-13

    def test_moments(self):
        """Integral of x^(2k) exp(-x^2) is Gamma(k + 1/2)"""
        from torchintegrate.quadrature import gauss_hermite_nodes_weights

        nodes, weights = gauss_hermite_nodes_weights(8)

        for k in range(0, 8):
            result = (weights * nodes ** (2 * k)).sum().item()
            assert math.isclose(result, math.gamma(k + 0.5), rel_tol=1e-12)


class TestGaussChebyshevNodesWeights:
    @pytest.mark.parametrize("n", [1, 2, 5, 16, 33])
    def test_first_kind_matches_numpy(self, n):
        from torchintegrate.quadrature import gauss_chebyshev_nodes_weights

        nodes, weights = gauss_chebyshev_nodes_weights(n, kind=1)
        expected_nodes, expected_weights = np.polynomial.chebyshev.chebgauss(n)
        order = np.argsort(expected_nodes)

        np.testing.assert_allclose(nodes.numpy(), expected_nodes[order], atol=1e-15)
        np.testing.assert_allclose(
            weights.numpy(), expected_weights[order], rtol=1e-15
        )

    @pytest.mark.parametrize("n", [1, 2, 5, 16, 33])
    def test_second_kind_matches_scipy(self, n):
        from torchintegrate.quadrature import gauss_chebyshev_nodes_weights

        nodes, weights = gauss_chebyshev_nodes_weights(n, kind=2)
        expected_nodes, expected_weights = scipy.special.roots_chebyu(n)
        order = np.argsort(expected_nodes)

        np.testing.assert_allclose(nodes.numpy(), expected_nodes[order], atol=1e-14)
        np.testing.assert_allclose(
            weights.numpy(), expected_weights[order], rtol=1e-12
        )

    @pytest.mark.parametrize("kind, total", [(1, math.pi), (2, math.pi / 2)])
    @pytest.mark.parametrize("n", [1, 4, 7])
    def test_symmetric(self, n, kind, total):
        from torchintegrate.quadrature import gauss_chebyshev_nodes_weights

        nodes, weights = gauss_chebyshev_nodes_weights(n, kind=kind)

        assert_symmetric(nodes, weights)
        assert abs(weights.sum().item() - total) < 1e-14

    def test_odd_middle_weight(self):
        from torchintegrate.quadrature import gauss_chebyshev_nodes_weights

        nodes, weights = gauss_chebyshev_nodes_weights(5, kind=2)

        assert nodes[2].item() == 0.0
        assert weights[2].item() == math.pi / 6

    def test_invalid_kind(self):
        from torchintegrate.quadrature import gauss_chebyshev_nodes_weights

        with pytest.raises(ValueError, match="kind"):
            gauss_chebyshev_nodes_weights(4, kind=3)


class TestGaussNodesWeights:
    @pytest.mark.parametrize(
        "family",
        ["legendre", "laguerre", "hermite", "chebyshev_first", "chebyshev_second"],
    )
    def test_dispatch_by_name(self, family):
        from torchintegrate.quadrature import QuadratureFamily, gauss_nodes_weights

        by_name = gauss_nodes_weights(family, 6)
        by_enum = gauss_nodes_weights(QuadratureFamily(family), 6)

        assert torch.equal(by_name[0], by_enum[0])
        assert torch.equal(by_name[1], by_enum[1])
        assert by_name[0].shape == (6,)

    def test_matches_family_function(self):
        from torchintegrate.quadrature import (
            gauss_chebyshev_nodes_weights,
            gauss_nodes_weights,
        )

        nodes, weights = gauss_nodes_weights("chebyshev_second", 9)
        expected_nodes, expected_weights = gauss_chebyshev_nodes_weights(9, 2)

        assert torch.equal(nodes, expected_nodes)
        assert torch.equal(weights, expected_weights)

    def test_unknown_family(self):
        from torchintegrate.quadrature import gauss_nodes_weights

        with pytest.raises(ValueError):
            gauss_nodes_weights("jacobi", 4)


class TestRootFindingFailure:
    @pytest.mark.parametrize(
        "generator, n, index",
        [
            ("gauss_legendre_nodes_weights", 5, 3),
            ("gauss_legendre_nodes_weights", 6, 4),
            ("gauss_laguerre_nodes_weights", 4, 1),
            ("gauss_hermite_nodes_weights", 4, 3),
            ("gauss_hermite_nodes_weights", 5, 3),
        ],
    )
    def test_reports_first_failing_node(self, monkeypatch, generator, n, index):
        """An exhausted iteration budget names the family and node"""
        import torchintegrate.quadrature._nodes as nodes_module
        from torchintegrate.quadrature import RootFindingFailed

        monkeypatch.setattr(nodes_module, "_NEWTON_MAXITER", 0)

        with pytest.raises(RootFindingFailed) as excinfo:
            getattr(nodes_module, generator)(n)

        assert excinfo.value.index == index
        assert excinfo.value.family == generator.split("_")[1]

    def test_asymptotic_branch_does_not_iterate(self, monkeypatch):
        import torchintegrate.quadrature._nodes as nodes_module

        monkeypatch.setattr(nodes_module, "_NEWTON_MAXITER", 0)

        nodes, _ = nodes_module.gauss_legendre_nodes_weights(120)

        assert nodes.shape == (120,)
