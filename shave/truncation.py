"""Bit-level mantissa truncation for simulating reduced-precision hardware."""

import numbers
import struct
from dataclasses import dataclass

import numpy as np


# =============================================================================
# IEEE-754 double layout
# =============================================================================

FRACTION_BITS = 52
EXPONENT_BIAS = 1023
FRACTION_MASK = (1 << FRACTION_BITS) - 1
IMPLICIT_BIT = 1 << FRACTION_BITS
SIGN_BIT = 1 << 63
ALL_ONES = (1 << 64) - 1

MIN_MANTISSA_BITS = 0
MAX_MANTISSA_BITS = FRACTION_BITS
DEFAULT_MANTISSA_BITS = 24


class InvalidTruncationWidth(ValueError):
    """Raised when a truncation width falls outside [0, 52]."""


def validate_mantissa_bits(bits):
    """Return `bits` as an int, rejecting anything outside [0, 52].

    Out-of-range widths are rejected rather than clamped.
    """
    if isinstance(bits, bool) or not isinstance(bits, numbers.Integral):
        raise InvalidTruncationWidth(f"Truncation width must be an integer, got {bits!r}")
    bits = int(bits)
    if not MIN_MANTISSA_BITS <= bits <= MAX_MANTISSA_BITS:
        raise InvalidTruncationWidth(
            f"Truncation width must be in [{MIN_MANTISSA_BITS}, {MAX_MANTISSA_BITS}], got {bits}"
        )
    return bits


@dataclass(frozen=True)
class TruncationConfig:
    """Simulated precision, fixed for the lifetime of a run."""

    mantissa_bits: int = DEFAULT_MANTISSA_BITS

    def __post_init__(self):
        object.__setattr__(self, "mantissa_bits", validate_mantissa_bits(self.mantissa_bits))


# =============================================================================
# Scalar truncation
# =============================================================================


def _float_to_bits(value):
    return struct.unpack("<Q", struct.pack("<d", value))[0]


def _bits_to_float(pattern):
    return struct.unpack("<d", struct.pack("<Q", pattern))[0]


def truncate_mantissa(x, bits=DEFAULT_MANTISSA_BITS):
    """Clear the low-order significand bits of a double.

    The significand (with its implicit leading bit) is masked with
    ``ALL_ONES << (bits - exponent)``, which clears every bit worth less than
    ``2 ** (bits - 52)``. The exponent and the leading bit always survive, so
    the result has the sign and binary order of magnitude of `x` and
    ``0 <= |x| - |result| < 2 ** (bits - 52)``.

    Args:
        x: Value to truncate
        bits: Truncation width in [0, 52]; larger is coarser

    Returns:
        The truncated value. Zero and subnormals become 0.0; magnitudes of
        at least ``2 ** bits`` (including inf and nan) are returned as-is.
    """
    bits = validate_mantissa_bits(bits)
    x = float(x)

    negative = x < 0
    pattern = _float_to_bits(abs(x))

    biased_exponent = pattern >> FRACTION_BITS
    if biased_exponent == 0:
        return 0.0

    exponent = biased_exponent - EXPONENT_BIAS
    if exponent >= bits:
        return x

    # Shifts of 64 or more leave an empty mask
    mask = (ALL_ONES << (bits - exponent)) & ALL_ONES
    significand = (pattern & FRACTION_MASK) | IMPLICIT_BIT
    truncated = (biased_exponent << FRACTION_BITS) | (significand & mask & FRACTION_MASK)
    if negative:
        truncated |= SIGN_BIT
    return _bits_to_float(truncated)


# =============================================================================
# Array truncation
# =============================================================================


def truncate_array(values, bits=DEFAULT_MANTISSA_BITS, out=None):
    """Vectorised `truncate_mantissa`, bit-for-bit identical to the scalar path.

    Args:
        values: Array-like of floats (converted to float64)
        bits: Truncation width in [0, 52]
        out: Optional float64 array to write the result into (may be `values`)

    Returns:
        Array of truncated values with the shape of `values`
    """
    bits = validate_mantissa_bits(bits)
    x = np.asarray(values, dtype=np.float64)

    pattern = np.abs(x).view(np.uint64)
    biased_exponent = pattern >> np.uint64(FRACTION_BITS)
    exponent = biased_exponent.astype(np.int64) - EXPONENT_BIAS

    # Only entries with exponent < bits are masked, so the shift is >= 1
    shift = np.clip(bits - exponent, 1, 64)
    mask = np.where(
        shift >= 64,
        np.uint64(0),
        np.left_shift(np.uint64(ALL_ONES), np.minimum(shift, 63).astype(np.uint64)),
    )
    significand = (pattern & np.uint64(FRACTION_MASK)) | np.uint64(IMPLICIT_BIT)
    truncated = (biased_exponent << np.uint64(FRACTION_BITS)) | (significand & mask & np.uint64(FRACTION_MASK))
    magnitude = truncated.view(np.float64)

    result = np.where(exponent >= bits, x, np.copysign(magnitude, x))
    result = np.where(biased_exponent == 0, 0.0, result)

    if out is None:
        return result
    out[...] = result
    return out
