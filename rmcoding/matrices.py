"""Generator and control matrices for majority-logic decodable block codes.

Two families are provided:

- Reed-Muller ``RM(r, m)`` built by :func:`rm_build`. Codeword position ``j``
  is the evaluation point whose coordinate ``x_(i+1)`` is bit ``i`` of ``j``.
  Generator rows are monomials graded by degree (``1, x1, ..., xm, x1x2, ...``).
  Decoding runs one stage per degree, highest degree first; the checks of a
  degree ``d`` monomial are the ``2^(m-d)`` sub-cubes spanned by its variables.
- Systematic Hamming codes built by :func:`hamming_build`, decoded in a single
  stage where every data bit is voted on by itself and by every dual codeword
  passing through it.

Source: https://en.wikipedia.org/wiki/Reed%E2%80%93Muller_code#Decoding
"""

import logging
from dataclasses import dataclass
from itertools import combinations

import numpy as np
from numpy.typing import NDArray

from rmcoding.errors import InvalidParameterError

logger = logging.getLogger(__name__)

# Stage d of RM(r, m) stores C(m, d) * 2^m check positions
MAX_ORDER = 10
MAX_PARITY_BITS = 8
MIN_PARITY_BITS = 2
PAD = -1


def _is_integer(value: object) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


@dataclass(frozen=True)
class CodeConfig:
    """Reed-Muller code parameters.

    ``order`` is the number of variables ``m`` (the value picked in the UI),
    ``degree`` the maximum monomial degree ``r``. Frozen so it can be used as
    a cache key.
    """

    order: int
    degree: int = 1

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not _is_integer(self.order) or not _is_integer(self.degree):
            msg = f"Order and degree must be integers, got {self.order!r} and {self.degree!r}"
            raise InvalidParameterError(msg)
        if not 0 <= self.order <= MAX_ORDER:
            msg = f"Order must be in [0, {MAX_ORDER}], got {self.order}"
            raise InvalidParameterError(msg)
        if not 0 <= self.degree <= self.order:
            msg = f"Degree must be in [0, order={self.order}], got {self.degree}"
            raise InvalidParameterError(msg)

    @property
    def n(self) -> int:
        """Codeword length."""
        return 1 << self.order

    @property
    def k(self) -> int:
        """Message length, the number of monomials of degree <= r."""
        return len(rm_monomials(self.order, self.degree))


@dataclass(frozen=True, eq=False)
class DecodingStage:
    """One majority-logic stage.

    ``positions[c, j]`` lists the received positions summed by check ``j`` of
    coefficient ``c``, padded with ``PAD`` when checks differ in size.
    ``contribution[c]`` is the generator row of that coefficient, subtracted
    from the residual once the coefficient is decided. ``rows[c]`` is its
    position in the message block.
    """

    index: int
    rows: NDArray[np.intp]
    positions: NDArray[np.intp]
    contribution: NDArray[np.uint8]

    @property
    def num_checks(self) -> int:
        """Number of checks voting on each coefficient."""
        return int(self.positions.shape[1])

    def dense_checks(self) -> NDArray[np.uint8]:
        """Characteristic vectors of the checks, shape (num_coeffs, num_checks, n)."""
        num_coeffs, num_checks, _ = self.positions.shape
        dense = np.zeros((num_coeffs, num_checks, self.contribution.shape[1]), dtype=np.uint8)
        c, j, w = np.nonzero(self.positions != PAD)
        dense[c, j, self.positions[c, j, w]] = 1
        return dense


@dataclass(frozen=True, eq=False)
class LinearCode:
    """Generator matrix and control matrices of one block code."""

    name: str
    k: int
    n: int
    generator: NDArray[np.uint8]
    stages: tuple[DecodingStage, ...]
    min_distance: int

    @property
    def correctable(self) -> int:
        """Number of bit errors per block the decoder always corrects."""
        return (self.min_distance - 1) // 2

    @property
    def rate(self) -> float:
        """Code rate k/n."""
        return self.k / self.n


# ---------------------------------------------------------------------------
# Module-level caches
# ---------------------------------------------------------------------------
_rm_cache: dict[CodeConfig, LinearCode] = {}
_hamming_cache: dict[int, LinearCode] = {}


def _freeze(arr: np.ndarray) -> np.ndarray:
    arr.setflags(write=False)
    return arr


def rm_monomials(order: int, degree: int) -> list[tuple[int, ...]]:
    """List monomials of degree <= ``degree`` in generator row order."""
    return [s for d in range(degree + 1) for s in combinations(range(order), d)]


def rm_build(order: int, degree: int = 1) -> LinearCode:
    """Get (or build and cache) the ``RM(degree, order)`` code."""
    config = CodeConfig(order=order, degree=degree)
    if config not in _rm_cache:
        _rm_cache[config] = _build_reed_muller(config)
    else:
        logger.debug("Using cached RM(%d,%d)", config.degree, config.order)
    return _rm_cache[config]


def hamming_build(parity_bits: int = 3) -> LinearCode:
    """Get (or build and cache) the systematic Hamming code with ``parity_bits`` parity bits."""
    if not _is_integer(parity_bits) or not MIN_PARITY_BITS <= parity_bits <= MAX_PARITY_BITS:
        msg = f"Parity bits must be an integer in [{MIN_PARITY_BITS}, {MAX_PARITY_BITS}], got {parity_bits!r}"
        raise InvalidParameterError(msg)
    if parity_bits not in _hamming_cache:
        _hamming_cache[parity_bits] = _build_hamming(int(parity_bits))
    return _hamming_cache[parity_bits]


def rm_clear_cache() -> None:
    """Clear all cached codes."""
    _rm_cache.clear()
    _hamming_cache.clear()


# ---------------------------------------------------------------------------
# Internal builders
# ---------------------------------------------------------------------------


def _build_reed_muller(config: CodeConfig) -> LinearCode:
    m, r, n = int(config.order), int(config.degree), config.n
    points = np.arange(n)
    variables = ((points[np.newaxis, :] >> np.arange(m)[:, np.newaxis]) & 1).astype(np.uint8)

    monomials = rm_monomials(m, r)
    generator = np.ones((len(monomials), n), dtype=np.uint8)
    for row, monomial in enumerate(monomials):
        for var in monomial:
            generator[row] &= variables[var]

    stages = []
    for index, d in enumerate(range(r, -1, -1)):
        rows = np.array([i for i, s in enumerate(monomials) if len(s) == d], dtype=np.intp)
        positions = np.stack([_subcube_positions(monomials[i], points, n) for i in rows])
        stages.append(
            DecodingStage(
                index=index,
                rows=_freeze(rows),
                positions=_freeze(positions),
                contribution=_freeze(generator[rows].copy()),
            ),
        )

    code = LinearCode(
        name=f"RM({r},{m})",
        k=len(monomials),
        n=n,
        generator=_freeze(generator),
        stages=tuple(stages),
        min_distance=1 << (m - r),
    )
    logger.debug("Built %s: k=%d n=%d stages=%d", code.name, code.k, code.n, len(code.stages))
    return code


def _subcube_positions(monomial: tuple[int, ...], points: np.ndarray, n: int) -> NDArray[np.intp]:
    """One check per sub-cube spanned by the monomial's variables, shape (2^(m-d), 2^d)."""
    mask_in = sum(1 << var for var in monomial)
    mask_out = (n - 1) ^ mask_in
    anchors = points[(points & mask_in) == 0]
    offsets = points[(points & mask_out) == 0]
    return (anchors[:, np.newaxis] | offsets[np.newaxis, :]).astype(np.intp)


def _build_hamming(parity_bits: int) -> LinearCode:
    n = (1 << parity_bits) - 1
    k = n - parity_bits
    shifts = np.arange(parity_bits)

    # Data columns of H are the vectors of weight >= 2 in increasing order;
    # for 3 parity bits this gives p1 = d1^d2^d4, p2 = d1^d3^d4, p3 = d2^d3^d4.
    data_columns = np.array([v for v in range(1, n + 1) if bin(v).count("1") >= MIN_PARITY_BITS])
    parity = ((data_columns[:, np.newaxis] >> shifts) & 1).astype(np.uint8)
    generator = np.hstack([np.eye(k, dtype=np.uint8), parity])
    h_matrix = np.hstack([parity.T, np.eye(parity_bits, dtype=np.uint8)])

    combos = (np.arange(1, n + 1)[:, np.newaxis] >> shifts) & 1
    dual = (combos @ h_matrix % 2).astype(np.uint8)

    # The bit itself, then each weight 2^(p-1) dual word through it minus the bit
    width = max(1, (1 << (parity_bits - 1)) - 1)
    through = [dual[dual[:, i] == 1] for i in range(k)]
    positions = np.full((k, 1 + len(through[0]), width), PAD, dtype=np.intp)
    for i, words in enumerate(through):
        positions[i, 0, 0] = i
        words = words.copy()
        words[:, i] = 0
        for j, word in enumerate(words, start=1):
            members = np.flatnonzero(word)
            positions[i, j, : len(members)] = members

    rows = np.arange(k, dtype=np.intp)
    stage = DecodingStage(
        index=0,
        rows=_freeze(rows),
        positions=_freeze(positions),
        contribution=_freeze(generator.copy()),
    )
    code = LinearCode(
        name=f"Hamming({n},{k})",
        k=k,
        n=n,
        generator=_freeze(generator),
        stages=(stage,),
        min_distance=3,
    )
    logger.debug("Built %s with %d checks per data bit", code.name, stage.num_checks)
    return code
