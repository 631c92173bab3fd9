"""Error-rate metrics for coded and uncoded transmission."""

import numpy as np
from numpy.typing import ArrayLike
from scipy import stats

from rmcoding.errors import InvalidParameterError, LengthMismatchError
from rmcoding.matrices import LinearCode
from rmcoding.util import as_bits


def count_bit_errors(original: ArrayLike, received: ArrayLike) -> int:
    """Count positions where two equal-length bit streams differ."""
    a = as_bits(original)
    b = as_bits(received)
    if len(a) != len(b):
        msg = f"Length mismatch: original={len(a)}, received={len(b)}"
        raise LengthMismatchError(msg)
    return int(np.count_nonzero(a != b))


def bit_error_rate(original: ArrayLike, received: ArrayLike) -> float:
    """Fraction of differing bits, 0.0 for empty streams."""
    errors = count_bit_errors(original, received)
    total = len(as_bits(original))
    return errors / total if total else 0.0


def block_error_bound(pe: float, n: int, correctable: int) -> float:
    """Probability that more than ``correctable`` of ``n`` bits flip on a BSC.

    This upper-bounds the block error rate of a decoder that always corrects
    up to ``correctable`` errors per block.

    Source: https://en.wikipedia.org/wiki/Binomial_distribution
    """
    if not 0.0 <= pe <= 1.0:
        msg = f"Error probability must be in [0, 1], got {pe}"
        raise InvalidParameterError(msg)
    if n < 1 or correctable < 0:
        msg = f"Need n >= 1 and correctable >= 0, got n={n}, correctable={correctable}"
        raise InvalidParameterError(msg)
    return float(stats.binom.sf(correctable, n, pe))


def code_rate(code: LinearCode) -> float:
    """Message bits carried per transmitted bit, k/n."""
    return code.k / code.n
