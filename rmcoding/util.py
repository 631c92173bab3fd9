"""Bit-stream helpers shared by the encoder, channel and decoder."""

import numpy as np
from numpy.typing import ArrayLike, NDArray

from rmcoding.errors import InvalidParameterError, LengthMismatchError

BYTE_SIZE = 8


def as_bits(bits: ArrayLike) -> NDArray[np.uint8]:
    """Return ``bits`` as a flat uint8 array, rejecting anything but 0 and 1."""
    arr = np.asarray(bits)
    if arr.ndim != 1:
        arr = arr.reshape(-1)
    if arr.size and not np.all((arr == 0) | (arr == 1)):
        msg = "Bit stream must only contain 0 and 1"
        raise InvalidParameterError(msg)
    return arr.astype(np.uint8)


def split_blocks(bits: NDArray[np.uint8], block_length: int) -> NDArray[np.uint8]:
    """Reshape a stream into rows of ``block_length`` bits."""
    if len(bits) % block_length != 0:
        msg = f"Stream length {len(bits)} is not a multiple of block length {block_length}"
        raise LengthMismatchError(msg)
    return bits.reshape(-1, block_length)


def padding_length(length: int, k: int) -> int:
    """Number of zero bits that make ``length`` a multiple of ``k``."""
    if k < 1:
        msg = f"Block length must be positive, got {k}"
        raise InvalidParameterError(msg)
    return (k - length % k) % k


def pad_bits(bits: ArrayLike, k: int) -> tuple[NDArray[np.uint8], int]:
    """Append trailing zeros up to a multiple of ``k``.

    Returns the padded stream together with the padding count, which the
    caller must hand back to :func:`strip_padding` after decoding.
    """
    arr = as_bits(bits)
    padding = padding_length(len(arr), k)
    if padding:
        arr = np.concatenate([arr, np.zeros(padding, dtype=np.uint8)])
    return arr, padding


def strip_padding(bits: ArrayLike, padding: int) -> NDArray[np.uint8]:
    """Drop the ``padding`` trailing bits added by :func:`pad_bits`."""
    arr = as_bits(bits)
    if padding < 0 or padding > len(arr):
        msg = f"Padding {padding} is out of range for a stream of {len(arr)} bits"
        raise LengthMismatchError(msg)
    return arr[: len(arr) - padding]


def bytes_to_bits(data: bytes) -> NDArray[np.uint8]:
    """Convert raw bytes to a bit array (most significant bit first)."""
    return np.unpackbits(np.frombuffer(data, dtype=np.uint8))


def bits_to_bytes(bits: ArrayLike) -> bytes:
    """Convert a bit array back to raw bytes."""
    arr = as_bits(bits)
    remainder = len(arr) % BYTE_SIZE
    if remainder:
        arr = np.concatenate([arr, np.zeros(BYTE_SIZE - remainder, dtype=np.uint8)])
    return np.packbits(arr).tobytes()


def text_to_bits(text: str) -> NDArray[np.uint8]:
    """Convert a UTF-8 string to a bit array."""
    return bytes_to_bits(text.encode("utf-8"))


def bits_to_text(bits: ArrayLike) -> str:
    """Convert a bit array back to a UTF-8 string."""
    return bits_to_bytes(bits).decode("utf-8", errors="replace")
