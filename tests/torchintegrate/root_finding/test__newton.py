# tests/torchintegrate/root_finding/test__newton.py
import math

import torch

from torchintegrate.root_finding import newton_polish


class TestNewtonPolish:
    """Tests for vectorized Newton polishing."""

    def test_simple_quadratic(self):
        """Polish sqrt(2) from a nearby seed."""
        evaluate = lambda x: (x**2 - 2, 2 * x)
        x0 = torch.tensor([1.5], dtype=torch.float64)

        root, converged = newton_polish(evaluate, x0)

        torch.testing.assert_close(
            root,
            torch.tensor([math.sqrt(2)], dtype=torch.float64),
            rtol=1e-14,
            atol=1e-14,
        )
        assert converged.all()

    def test_batched(self):
        """Every element is an independent problem."""
        c = torch.tensor([2.0, 3.0, 4.0, 5.0], dtype=torch.float64)
        evaluate = lambda x: (x**2 - c, 2 * x)
        x0 = torch.full((4,), 1.5, dtype=torch.float64)

        roots, converged = newton_polish(evaluate, x0)

        torch.testing.assert_close(roots, torch.sqrt(c))
        assert converged.all()

    def test_preserves_shape(self):
        """Output has the shape of the seeds."""
        evaluate = lambda x: (x**3 - 8, 3 * x**2)
        x0 = torch.full((2, 3), 2.5, dtype=torch.float64)

        roots, converged = newton_polish(evaluate, x0)

        assert roots.shape == (2, 3)
        assert converged.shape == (2, 3)
        torch.testing.assert_close(roots, torch.full((2, 3), 2.0).double())

    def test_bracket_replaces_wild_step(self):
        """A step leaving the bracket is replaced by bisection."""
        # Plain Newton on atan diverges from x0 = 2
        evaluate = lambda x: (torch.atan(x), 1 / (1 + x**2))
        x0 = torch.tensor([2.0], dtype=torch.float64)

        root, converged = newton_polish(
            evaluate, x0, lower=-1.0, upper=3.0, maxiter=20
        )

        assert converged.all()
        assert abs(root.item()) < 1e-12

    def test_budget_exhausted(self):
        """Seeds without a nearby root are reported, not retried."""
        evaluate = lambda x: (x**2 + 1, 2 * x)
        x0 = torch.tensor([0.5, 3.0], dtype=torch.float64)

        _, converged = newton_polish(evaluate, x0, maxiter=5)

        assert not converged.any()

    def test_partial_convergence(self):
        """Converged elements are frozen while others keep iterating."""
        evaluate = lambda x: (x**2 - 4, 2 * x)
        x0 = torch.tensor([2.0, 3.0], dtype=torch.float64)

        roots, converged = newton_polish(evaluate, x0)

        assert converged.all()
        assert roots[0].item() == 2.0

    def test_empty(self):
        evaluate = lambda x: (x, torch.ones_like(x))
        x0 = torch.empty(0, dtype=torch.float64)

        roots, converged = newton_polish(evaluate, x0)

        assert roots.numel() == 0
        assert converged.numel() == 0

    def test_float32(self):
        """Default tolerances follow the dtype."""
        evaluate = lambda x: (x**2 - 2, 2 * x)
        x0 = torch.tensor([1.5], dtype=torch.float32)

        root, converged = newton_polish(evaluate, x0)

        assert root.dtype == torch.float32
        assert converged.all()
        assert abs(root.item() - math.sqrt(2)) < 1e-6
