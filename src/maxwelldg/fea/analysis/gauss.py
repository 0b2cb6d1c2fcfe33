from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


def n_points_for_order(order: int) -> int:
    """Smallest number of Gauss-Legendre points integrating polynomials of degree ``order`` exactly."""
    return max(order, 0) // 2 + 1


@lru_cache(maxsize=None)
def _gauss_legendre(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    points, weights = np.polynomial.legendre.leggauss(n_points)
    return points, weights


def gauss_points_weights_edge(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Generate Gauss points and weights for a 1D Gaussian integration on the interval [-1, +1].

    Args:
        n_points: Number of integration points.

    Raises:
        ValueError: If `n_points` is smaller than 1.

    Returns:
        A tuple containing the Gauss points and weights.
    """
    if n_points < 1:
        raise ValueError(f"Unsupported number of Gauss points: {n_points}. 'n_points' must be at least 1.")
    points, weights = _gauss_legendre(n_points)
    return points.copy(), weights.copy()


def gauss_points_weights_quadrilateral(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Generate Gauss points and weights for the reference square [-1, +1] x [-1, +1].

    Args:
        n_points: Number of integration points per direction.

    Returns:
        Points of shape (n_points**2, 2), x running fastest, and their weights.
    """
    points, weights = gauss_points_weights_edge(n_points)
    xi, eta = np.meshgrid(points, points, indexing="xy")
    w = np.outer(weights, weights)
    return np.column_stack([xi.ravel(), eta.ravel()]), w.ravel()


def gauss_points_weights_triangle(n_points: int) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
    """
    Generate collapsed Gauss points and weights for a triangular integration.

    Triangle is assumed to be a unit triangle with vertices at (0,0), (1,0), and (0,1).
    A tensor Gauss rule on the square is mapped with the Duffy transform, so
    ``n_points`` per direction integrate polynomials of degree 2*n_points - 2 exactly.

    The weights are multiplied by the area of the triangle (1/2 for a unit triangle).

    Args:
        n_points: Number of integration points per direction.

    Returns:
        Points (r, s) of shape (n_points**2, 2) and their weights.
    """
    points, weights = gauss_points_weights_edge(n_points)
    a, b = np.meshgrid(points, points, indexing="xy")
    wa, wb = np.meshgrid(weights, weights, indexing="xy")
    u = 0.5 * (1.0 + a.ravel())
    v = 0.5 * (1.0 + b.ravel())
    r = u * (1.0 - v)
    s = v
    w = 0.25 * (1.0 - v) * (wa * wb).ravel()
    return np.column_stack([r, s]), w


@lru_cache(maxsize=None)
def _gauss_lobatto(n_points: int) -> npt.NDArray[np.float64]:
    if n_points == 1:
        return np.array([0.0])
    # interior nodes are the roots of P'_{n-1}
    interior = np.polynomial.legendre.Legendre.basis(n_points - 1).deriv().roots()
    return np.concatenate([[-1.0], np.sort(interior.real), [1.0]])


def gauss_lobatto_points(n_points: int) -> npt.NDArray[np.float64]:
    """
    Gauss-Lobatto-Legendre points on [-1, +1] in ascending order.

    A single point is placed at the midpoint.

    Raises:
        ValueError: If `n_points` is smaller than 1.
    """
    if n_points < 1:
        raise ValueError(f"Unsupported number of Gauss-Lobatto points: {n_points}. 'n_points' must be at least 1.")
    return _gauss_lobatto(n_points).copy()
