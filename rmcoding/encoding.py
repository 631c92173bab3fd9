"""Block encoder: codeword = message . G (mod 2)."""

from collections.abc import Iterator

import numpy as np
from numpy.typing import ArrayLike, NDArray

from rmcoding.errors import DimensionMismatchError, InvalidParameterError
from rmcoding.util import as_bits, split_blocks

DEFAULT_CHUNK_BLOCKS = 4096


def check_dimensions(k: int, n: int) -> None:
    """Reject non-positive block lengths or k > n."""
    if k < 1 or n < 1 or k > n:
        msg = f"Block lengths must satisfy 1 <= k <= n, got k={k}, n={n}"
        raise InvalidParameterError(msg)


def check_chunk_blocks(chunk_blocks: int) -> None:
    """Reject chunk sizes that cannot hold a whole block."""
    if chunk_blocks < 1:
        msg = f"chunk_blocks must be positive, got {chunk_blocks}"
        raise InvalidParameterError(msg)


def _as_generator(generator: ArrayLike, k: int, n: int) -> NDArray[np.uint8]:
    g_mat = np.asarray(generator)
    if g_mat.shape != (k, n):
        msg = f"Generator matrix shape {g_mat.shape} does not match k={k}, n={n}"
        raise DimensionMismatchError(msg)
    return as_bits(g_mat).reshape(k, n)


def encode_blocks(blocks: NDArray[np.uint8], generator: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Encode a (num_blocks, k) array into a (num_blocks, n) array."""
    return (blocks.astype(np.int64) @ generator.astype(np.int64) % 2).astype(np.uint8)


def rm_iter_encode(
    message: ArrayLike,
    k: int,
    n: int,
    generator: ArrayLike,
    chunk_blocks: int = DEFAULT_CHUNK_BLOCKS,
) -> Iterator[NDArray[np.uint8]]:
    """Lazily encode ``message`` in chunks of ``chunk_blocks`` codewords.

    All validation happens before the iterator is returned, so a caller
    never receives part of an encoding for an invalid input. Each yielded
    chunk holds whole codewords only.
    """
    check_dimensions(k, n)
    check_chunk_blocks(chunk_blocks)
    g_mat = _as_generator(generator, k, n)
    blocks = split_blocks(as_bits(message), k)
    return _encode_chunks(blocks, g_mat, chunk_blocks)


def _encode_chunks(
    blocks: NDArray[np.uint8],
    generator: NDArray[np.uint8],
    chunk_blocks: int,
) -> Iterator[NDArray[np.uint8]]:
    for start in range(0, len(blocks), chunk_blocks):
        yield encode_blocks(blocks[start : start + chunk_blocks], generator).reshape(-1)


def rm_encode(message: ArrayLike, k: int, n: int, generator: ArrayLike) -> NDArray[np.uint8]:
    """Encode a message whose length is a multiple of k into concatenated codewords."""
    chunks = list(rm_iter_encode(message, k, n, generator))
    if not chunks:
        return np.zeros(0, dtype=np.uint8)
    return np.concatenate(chunks)
