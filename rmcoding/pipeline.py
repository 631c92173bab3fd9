"""End-to-end pipeline: pad, encode, transmit, decode, strip."""

import logging
import time
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from rmcoding.channel import BinarySymmetricChannel, ChannelConfig
from rmcoding.decoding import rm_decode
from rmcoding.encoding import rm_encode
from rmcoding.matrices import LinearCode, rm_build
from rmcoding.metrics import bit_error_rate, count_bit_errors
from rmcoding.util import as_bits, pad_bits, strip_padding

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class TransmissionResult:
    """Every intermediate stream of one pipeline run."""

    message: NDArray[np.uint8]
    padding: int
    codeword: NDArray[np.uint8]
    received: NDArray[np.uint8]
    channel_errors: NDArray[np.uint8]
    decoded: NDArray[np.uint8]  # padding already stripped
    uncoded_received: NDArray[np.uint8]  # message sent through the same channel without coding

    @property
    def coded_bit_errors(self) -> int:
        """Bit errors left after decoding."""
        return count_bit_errors(self.message, self.decoded)

    @property
    def uncoded_bit_errors(self) -> int:
        """Bit errors when the message is sent without coding."""
        return count_bit_errors(self.message, self.uncoded_received)

    @property
    def coded_ber(self) -> float:
        """Bit error rate after decoding."""
        return bit_error_rate(self.message, self.decoded)

    @property
    def uncoded_ber(self) -> float:
        """Bit error rate without coding."""
        return bit_error_rate(self.message, self.uncoded_received)


class CodingSession:
    """Hold one code and run messages of arbitrary length through it.

    The code is immutable configuration shared by encode and decode; it is
    only replaced when :meth:`select_order` picks different parameters.
    """

    def __init__(self, code: LinearCode) -> None:
        """Initialize the session with a built code."""
        self.code = code

    @classmethod
    def reed_muller(cls, order: int, degree: int = 1) -> "CodingSession":
        """Create a session for ``RM(degree, order)``."""
        return cls(rm_build(order, degree))

    @property
    def k(self) -> int:
        """Message block length."""
        return self.code.k

    @property
    def n(self) -> int:
        """Codeword block length."""
        return self.code.n

    def select_order(self, order: int, degree: int = 1) -> LinearCode:
        """Switch to ``RM(degree, order)``, rebuilding matrices only if it changed."""
        code = rm_build(order, degree)
        if (code.name, code.k, code.n) != (self.code.name, self.code.k, self.code.n):
            logger.info("Switched code from %s to %s", self.code.name, code.name)
            self.code = code
        return self.code

    def encode(self, message: ArrayLike) -> tuple[NDArray[np.uint8], int]:
        """Pad ``message`` to whole blocks and encode it.

        Returns the codeword stream and the padding count needed by :meth:`decode`.
        """
        padded, padding = pad_bits(message, self.k)
        start = time.perf_counter()
        codeword = rm_encode(padded, self.k, self.n, self.code.generator)
        logger.info("Encoding took: %.1f ms", (time.perf_counter() - start) * 1e3)
        return codeword, padding

    def decode(self, received: ArrayLike, padding: int) -> NDArray[np.uint8]:
        """Decode ``received`` and strip the ``padding`` bits added by :meth:`encode`."""
        start = time.perf_counter()
        decoded = rm_decode(received, self.code.stages, self.k, self.n)
        logger.info("Decoding took: %.1f ms", (time.perf_counter() - start) * 1e3)
        return strip_padding(decoded, padding)

    def run(
        self,
        message: ArrayLike,
        pe: float,
        rng: np.random.Generator | None = None,
    ) -> TransmissionResult:
        """Send ``message`` through the code and a BSC, plus once uncoded for comparison."""
        bits = as_bits(message)
        channel = BinarySymmetricChannel(ChannelConfig(pe=pe), rng=rng)

        codeword, padding = self.encode(bits)
        received, errors = channel.transmit_with_errors(codeword)
        decoded = self.decode(received, padding)
        uncoded_received = channel.transmit(bits)

        result = TransmissionResult(
            message=bits,
            padding=padding,
            codeword=codeword,
            received=received,
            channel_errors=errors,
            decoded=decoded,
            uncoded_received=uncoded_received,
        )
        logger.debug(
            "%s pe=%g: %d channel flips, %d coded / %d uncoded bit errors",
            self.code.name,
            pe,
            int(errors.sum()),
            result.coded_bit_errors,
            result.uncoded_bit_errors,
        )
        return result
