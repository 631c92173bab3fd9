"""Hard-decision majority-logic (Reed) decoder.

Each stage computes its parity checks against the residual block, decides
every coefficient it owns by majority vote, and subtracts the decided
coefficients' generator rows from the residual before the next stage runs.
A vote split exactly in half decides 0 and is counted as a tie; ties and
blocks beyond the correction radius are not errors, they only reduce
decoding accuracy.
"""

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

import numba
import numpy as np
from numpy.typing import ArrayLike, NDArray

from rmcoding.encoding import DEFAULT_CHUNK_BLOCKS, check_chunk_blocks, check_dimensions
from rmcoding.errors import DimensionMismatchError
from rmcoding.matrices import PAD, DecodingStage
from rmcoding.util import as_bits, split_blocks

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class StageResult:
    """Outcome of one decoding stage over a batch of blocks."""

    decisions: NDArray[np.uint8]  # (num_blocks, num_coeffs)
    votes: NDArray[np.int64]  # checks evaluating to 1, per coefficient
    ties: NDArray[np.bool_]
    residual: NDArray[np.uint8]  # (num_blocks, n) after subtracting decisions


@numba.njit(cache=True)
def _count_votes(residual: np.ndarray, positions: np.ndarray) -> np.ndarray:
    """JIT-compiled count of checks that evaluate to 1."""
    num_blocks = residual.shape[0]
    num_coeffs, num_checks, width = positions.shape
    votes = np.zeros((num_blocks, num_coeffs), dtype=np.int64)
    for b in range(num_blocks):
        for c in range(num_coeffs):
            ones = 0
            for j in range(num_checks):
                parity = 0
                for w in range(width):
                    i = positions[c, j, w]
                    if i < 0:
                        break
                    parity ^= residual[b, i]
                ones += parity
            votes[b, c] = ones
    return votes


def run_stage(residual: NDArray[np.uint8], stage: DecodingStage) -> StageResult:
    """Run one majority-logic stage on a (num_blocks, n) residual array."""
    votes = _count_votes(np.ascontiguousarray(residual, dtype=np.uint8), np.ascontiguousarray(stage.positions))
    num_checks = stage.num_checks
    decisions = (2 * votes > num_checks).astype(np.uint8)
    ties = 2 * votes == num_checks
    removed = (decisions.astype(np.int64) @ stage.contribution.astype(np.int64) % 2).astype(np.uint8)
    return StageResult(decisions=decisions, votes=votes, ties=ties, residual=residual ^ removed)


def decode_blocks(
    blocks: NDArray[np.uint8],
    stages: Sequence[DecodingStage],
    k: int,
) -> tuple[NDArray[np.uint8], int]:
    """Decode a (num_blocks, n) array into (num_blocks, k) message blocks.

    Returns the message blocks and the number of tied votes resolved to 0.
    """
    message = np.zeros((len(blocks), k), dtype=np.uint8)
    residual = blocks
    num_ties = 0
    for stage in stages:
        result = run_stage(residual, stage)
        message[:, stage.rows] = result.decisions
        num_ties += int(result.ties.sum())
        residual = result.residual
    return message, num_ties


def check_stages(stages: Sequence[DecodingStage], k: int, n: int) -> None:
    """Verify the control matrices describe a k x n code."""
    if len(stages) == 0:
        msg = "At least one decoding stage is required"
        raise DimensionMismatchError(msg)

    decided = []
    for stage in stages:
        num_rows = len(stage.rows)
        positions = stage.positions
        if positions.ndim != 3 or positions.shape[0] != num_rows:
            msg = f"Stage {stage.index} check positions shape {positions.shape} does not match its {num_rows} rows"
            raise DimensionMismatchError(msg)
        if positions.size and (positions.max() >= n or positions.min() < PAD):
            msg = f"Stage {stage.index} checks reference positions outside a block of n={n}"
            raise DimensionMismatchError(msg)
        if stage.contribution.shape != (num_rows, n):
            msg = f"Stage {stage.index} contribution shape {stage.contribution.shape} does not match n={n}"
            raise DimensionMismatchError(msg)
        decided.extend(int(row) for row in stage.rows)

    if sorted(decided) != list(range(k)):
        msg = f"Decoding stages must decide each of the k={k} message bits exactly once"
        raise DimensionMismatchError(msg)


def rm_iter_decode(
    received: ArrayLike,
    stages: Sequence[DecodingStage],
    k: int,
    n: int,
    chunk_blocks: int = DEFAULT_CHUNK_BLOCKS,
) -> Iterator[NDArray[np.uint8]]:
    """Lazily decode ``received`` in chunks of ``chunk_blocks`` message blocks.

    Validation happens before the iterator is returned; each yielded chunk
    holds whole message blocks only.
    """
    check_dimensions(k, n)
    check_chunk_blocks(chunk_blocks)
    check_stages(stages, k, n)
    blocks = split_blocks(as_bits(received), n)
    return _decode_chunks(blocks, stages, k, chunk_blocks)


def _decode_chunks(
    blocks: NDArray[np.uint8],
    stages: Sequence[DecodingStage],
    k: int,
    chunk_blocks: int,
) -> Iterator[NDArray[np.uint8]]:
    for start in range(0, len(blocks), chunk_blocks):
        message, num_ties = decode_blocks(blocks[start : start + chunk_blocks], stages, k)
        if num_ties:
            logger.debug("Resolved %d tied votes to 0 in blocks starting at %d", num_ties, start)
        yield message.reshape(-1)


def rm_decode(
    received: ArrayLike,
    stages: Sequence[DecodingStage],
    k: int,
    n: int,
) -> NDArray[np.uint8]:
    """Decode concatenated codewords back into concatenated message blocks."""
    chunks = list(rm_iter_decode(received, stages, k, n))
    if not chunks:
        return np.zeros(0, dtype=np.uint8)
    return np.concatenate(chunks)
