"""Reed-Muller block coding over a binary symmetric channel."""

from rmcoding.channel import BinarySymmetricChannel, ChannelConfig, bsc_transmit
from rmcoding.decoding import rm_decode, rm_iter_decode
from rmcoding.encoding import rm_encode, rm_iter_encode
from rmcoding.errors import (
    CodingError,
    DimensionMismatchError,
    InvalidParameterError,
    LengthMismatchError,
)
from rmcoding.matrices import CodeConfig, LinearCode, hamming_build, rm_build

__all__ = [
    "BinarySymmetricChannel",
    "ChannelConfig",
    "CodeConfig",
    "CodingError",
    "DimensionMismatchError",
    "InvalidParameterError",
    "LengthMismatchError",
    "LinearCode",
    "bsc_transmit",
    "hamming_build",
    "rm_build",
    "rm_decode",
    "rm_encode",
    "rm_iter_decode",
    "rm_iter_encode",
]
