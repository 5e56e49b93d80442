r"""Bessel function values needed to seed the Gauss-Legendre nodes.

Only two quantities are required: the zeros :math:`j_{0,k}` of :math:`J_0` and
the squares :math:`J_1(j_{0,k})^2`. The first few are tabulated; the rest come
from their large-:math:`k` asymptotic expansions, which are accurate to double
precision beyond the tables.

Reference: I. Bogaert, "Iteration-free computation of Gauss-Legendre
quadrature nodes and weights", SIAM J. Sci. Comput. 36 (2014).
"""

import math

import torch
from torch import Tensor

_J0_ZEROS = (
    2.40482555769577276862163187933,
    5.52007811028631064959660411281,
    8.65372791291101221695419871266,
    11.7915344390142816137430449119,
    14.9309177084877859477625939974,
    18.0710639679109225431478829756,
    21.2116366298792589590783933505,
    24.3524715307493027370579447632,
    27.4934791320402547958772882346,
    30.6346064684319751175495789269,
    33.7758202135735686842385463467,
    36.9170983536640439797694930633,
    40.0584257646282392947993073740,
    43.1997917131767303575240727287,
    46.3411883716618140186857888791,
    49.4826098973978171736027615332,
    52.6240518411149960292512853804,
    55.7655107550199793116834927735,
    58.9069839260809421328344066346,
    62.0484691902271698828525002646,
)

_J1_SQUARED = (
    0.269514123941916926139021992911,
    0.115780138582203695807812836182,
    0.0736863511364082151406476811985,
    0.0540375731981162820417749182758,
    0.0426614290172430912655106063495,
    0.0352421034909961013587473033648,
    0.0300210701030546726750888157688,
    0.0261473914953080885904584675399,
    0.0231591218246913922652676382178,
    0.0207838291222678576039808057297,
    0.0188504506693176678161056800214,
    0.0172461575696650082995240053542,
    0.0158935181059235978027065594287,
    0.0147376260964721895895742982592,
    0.0137384651453871179182880484134,
    0.0128661817376151328791406637228,
    0.0120980515486267975471075438497,
    0.0114164712244916085168627222986,
    0.0108075927911802040115547286830,
    0.0102603729262807628110423992790,
    0.00976589713979105054059846736696,
)


def horner(x: Tensor, coefficients) -> Tensor:
    # Coefficients ordered from the highest power down
    result = torch.full_like(x, coefficients[0])
    for c in coefficients[1:]:
        result = result * x + c
    return result


def _tabulated(table, k: Tensor) -> Tensor:
    values = torch.tensor(table, dtype=torch.float64, device=k.device)
    index = (k.clamp(1, len(table)) - 1).long()
    return values[index]


def bessel_j0_zero(k: Tensor) -> Tensor:
    r"""
    The ``k``-th positive zero of :math:`J_0`, one-based.

    Parameters
    ----------
    k : Tensor
        Integer tensor of indices, ``k >= 1``.

    Returns
    -------
    Tensor
        float64 tensor with the shape of ``k``.

    Notes
    -----
    For :math:`k > 20` McMahon's expansion is used with
    :math:`\beta = \pi (k - 1/4)`:

    .. math::

        j_{0,k} \approx \beta + \frac{1}{8\beta} - \frac{31}{384\beta^3}
            + \frac{3779}{15360\beta^5} - \cdots
    """
    beta = math.pi * (k.to(torch.float64) - 0.25)
    r = 1.0 / beta
    r2 = r * r

    asymptotic = beta + r * horner(
        r2,
        (
            0.509225462402226769498681286758e8,
            -0.849353580299148769921876983660e6,
            0.186904765282320653831636345064e5,
            -0.567644412135183381139802038240e3,
            0.253364147973439050099206349206e2,
            -0.182443876720610119047619047619e1,
            0.246028645833333333333333333333,
            -0.807291666666666666666666666667e-1,
            0.125,
        ),
    )

    return torch.where(
        k <= len(_J0_ZEROS), _tabulated(_J0_ZEROS, k), asymptotic
    )


def bessel_j1_squared(k: Tensor) -> Tensor:
    r"""
    :math:`J_1(j_{0,k})^2`, the square of :math:`J_1` at the ``k``-th zero of
    :math:`J_0`.

    Tabulated for :math:`k \le 21`; beyond that an expansion in
    :math:`1 / (k - 1/4)` whose leading term is :math:`2 / (\pi^2 (k - 1/4))`.
    """
    x = 1.0 / (k.to(torch.float64) - 0.25)
    x2 = x * x

    asymptotic = x * (
        0.202642367284675542887758926420
        + x2
        * x2
        * horner(
            x2,
            (
                0.185395398206345628711318848386,
                -0.266837393702323757700998557826e-1,
                0.496101423268883102872271417616e-2,
                -0.123632349727175414724737657367e-2,
                0.433710719130746277915572905025e-3,
                -0.228969902772111653038747229723e-3,
                0.198924364245969295201137972743e-3,
                -0.303380429711290253026202643516e-3,
            ),
        )
    )

    return torch.where(
        k <= len(_J1_SQUARED), _tabulated(_J1_SQUARED, k), asymptotic
    )
