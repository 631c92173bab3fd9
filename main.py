"""Run a message through a Reed-Muller code and a binary symmetric channel."""

import argparse
import logging

import numpy as np

from rmcoding.pipeline import CodingSession
from rmcoding.util import bits_to_text, text_to_bits

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)


def main() -> None:
    """Encode, transmit and decode one payload, then log coded vs uncoded errors."""
    logger = logging.getLogger(__name__)
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--order", type=int, default=3, help="Reed-Muller order m (n = 2^m)")
    parser.add_argument("--degree", type=int, default=1, help="maximum monomial degree r")
    parser.add_argument("--pe", type=float, default=0.05, help="channel bit flip probability")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--bits", type=int, default=10_000, help="length of a random payload")
    parser.add_argument("--text", type=str, default=None, help="send this text instead of random bits")
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    message = text_to_bits(args.text) if args.text is not None else rng.integers(0, 2, size=args.bits)

    session = CodingSession.reed_muller(args.order, args.degree)
    logger.info(
        "Using %s: k=%d n=%d, corrects %d errors per block",
        session.code.name,
        session.k,
        session.n,
        session.code.correctable,
    )
    result = session.run(message, args.pe, rng=rng)
    logger.info("Padding: %d bits", result.padding)
    logger.info("Uncoded BER: %.5f (%d errors)", result.uncoded_ber, result.uncoded_bit_errors)
    logger.info("Coded BER:   %.5f (%d errors)", result.coded_ber, result.coded_bit_errors)
    if args.text is not None:
        logger.info("Uncoded text: %s", bits_to_text(result.uncoded_received))
        logger.info("Decoded text: %s", bits_to_text(result.decoded))


if __name__ == "__main__":
    main()
