"""Dense float64 matrix primitives used by the network.

None of these truncate. Precision loss is applied by the caller at chosen
points so the same arithmetic can be run with and without it.
"""

import numpy as np


class ShapeMismatch(ValueError):
    """Raised when matrix dimensions are incompatible for an operation."""


def as_matrix(values):
    """Return `values` as a 2-D float64 array (1-D input becomes a column)."""
    m = np.asarray(values, dtype=np.float64)
    if m.ndim == 1:
        m = m.reshape(-1, 1)
    if m.ndim != 2:
        raise ShapeMismatch(f"Expected a 1-D or 2-D array, got {m.ndim} dimensions")
    return m


def column(values, length=None):
    """Return `values` as an (n, 1) column, optionally checking n == length.

    Accepts a 1-D vector or a single row or column. Anything else raises
    `ShapeMismatch`, even if its element count would fit.
    """
    m = np.asarray(values, dtype=np.float64)
    if m.ndim > 2 or (m.ndim == 2 and 1 not in m.shape):
        raise ShapeMismatch(f"Expected a vector, got an array of shape {m.shape}")
    m = m.reshape(-1, 1)
    if length is not None and m.shape[0] != length:
        raise ShapeMismatch(f"Expected a vector of length {length}, got {m.shape[0]}")
    return m


def _check_same_shape(op, a, b):
    if a.shape != b.shape:
        raise ShapeMismatch(f"{op}: shapes {a.shape} and {b.shape} differ")


def dot(a, b):
    """Matrix product of an (m, k) and a (k, n) matrix."""
    a, b = as_matrix(a), as_matrix(b)
    if a.shape[1] != b.shape[0]:
        raise ShapeMismatch(f"dot: inner dimensions of {a.shape} and {b.shape} do not match")
    return a @ b


def multiply(a, b):
    """Elementwise (Hadamard) product."""
    a, b = as_matrix(a), as_matrix(b)
    _check_same_shape("multiply", a, b)
    return a * b


def add(a, b):
    a, b = as_matrix(a), as_matrix(b)
    _check_same_shape("add", a, b)
    return a + b


def subtract(a, b):
    a, b = as_matrix(a), as_matrix(b)
    _check_same_shape("subtract", a, b)
    return a - b


def scale(s, m):
    return float(s) * as_matrix(m)


def add_scalar(s, m):
    return as_matrix(m) + float(s)


def apply(fn, m):
    """Apply an elementwise, array-aware function (e.g. a ufunc) to `m`.

    Scalar-only callables should be wrapped with ``np.vectorize`` first.
    """
    m = as_matrix(m)
    out = np.asarray(fn(m), dtype=np.float64)
    if out.shape != m.shape:
        raise ShapeMismatch(f"apply: function changed shape {m.shape} to {out.shape}")
    return out
