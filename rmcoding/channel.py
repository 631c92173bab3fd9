"""Binary symmetric channel model.

Each transmitted bit is flipped independently with probability ``pe``.
Randomness comes from a ``numpy.random.Generator`` owned by the channel
instance (or injected by the caller), never from global state, so
independent channels can run concurrently and tests can use seeded
generators for reproducible error patterns.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from rmcoding.errors import InvalidParameterError
from rmcoding.util import as_bits

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChannelConfig:
    """Configuration for the binary symmetric channel."""

    pe: float = 0.0  # Probability that a bit is flipped

    # Reproducibility
    seed: int | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if isinstance(self.pe, bool) or not isinstance(self.pe, (int, float, np.integer, np.floating)):
            msg = f"Error probability must be a number, got {self.pe!r}"
            raise InvalidParameterError(msg)
        if not 0.0 <= self.pe <= 1.0:
            msg = f"Error probability must be in [0, 1], got {self.pe}"
            raise InvalidParameterError(msg)


class BinarySymmetricChannel:
    """Flip bits of a stream independently with probability ``pe``."""

    def __init__(self, config: ChannelConfig, rng: np.random.Generator | None = None) -> None:
        """Initialize the channel, seeding a private generator unless one is injected."""
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)

    def error_pattern(self, length: int) -> NDArray[np.uint8]:
        """Draw an error pattern: 1 where a bit is flipped."""
        pe = self.config.pe
        if pe == 0.0:
            return np.zeros(length, dtype=np.uint8)
        if pe == 1.0:
            return np.ones(length, dtype=np.uint8)
        return (self.rng.random(length) < pe).astype(np.uint8)

    def transmit_with_errors(self, bits: ArrayLike) -> tuple[NDArray[np.uint8], NDArray[np.uint8]]:
        """Transmit ``bits``, returning the received stream and the flip pattern."""
        tx = as_bits(bits)
        errors = self.error_pattern(len(tx))
        logger.debug("BSC pe=%g flipped %d of %d bits", self.config.pe, int(errors.sum()), len(tx))
        return tx ^ errors, errors

    def transmit(self, bits: ArrayLike) -> NDArray[np.uint8]:
        """Transmit ``bits`` and return the received stream."""
        received, _ = self.transmit_with_errors(bits)
        return received


def bsc_transmit(bits: ArrayLike, pe: float, rng: np.random.Generator | None = None) -> NDArray[np.uint8]:
    """Pass ``bits`` through a binary symmetric channel with flip probability ``pe``."""
    return BinarySymmetricChannel(ChannelConfig(pe=pe), rng=rng).transmit(bits)
