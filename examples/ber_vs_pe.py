#!/usr/bin/env python3
"""BER vs channel error probability for first-order Reed-Muller codes.

Compares the decoded bit error rate of RM(1, m) for several orders m with
uncoded transmission over the same binary symmetric channel, and overlays
the bounded-distance block error bound for each code.

Usage:
    uv run python examples/ber_vs_pe.py
"""

import matplotlib.pyplot as plt
import numpy as np
from tqdm import tqdm

from rmcoding.channel import BinarySymmetricChannel, ChannelConfig
from rmcoding.matrices import rm_build
from rmcoding.metrics import block_error_bound, code_rate
from rmcoding.pipeline import CodingSession

ORDERS = (3, 5, 7)
MESSAGE_BITS = 4096
N_TRIALS = 20


def simulate_uncoded(pe_range: np.ndarray, n_bits: int, n_trials: int) -> np.ndarray:
    """Simulate sending raw bits over the BSC."""
    ber = np.zeros(len(pe_range))
    for i, pe in enumerate(tqdm(pe_range, desc="Uncoded         ")):
        total_errors = 0
        for trial in range(n_trials):
            rng = np.random.default_rng(trial * 1000 + i)
            bits = rng.integers(0, 2, n_bits)
            channel = BinarySymmetricChannel(ChannelConfig(pe=float(pe)), rng=rng)
            total_errors += int(np.sum(channel.transmit(bits) != bits))
        ber[i] = total_errors / (n_bits * n_trials)
    return ber


def simulate_coded(pe_range: np.ndarray, order: int, n_bits: int, n_trials: int) -> np.ndarray:
    """Simulate RM(1, order) over the BSC with majority-logic decoding."""
    session = CodingSession.reed_muller(order)
    ber = np.zeros(len(pe_range))
    for i, pe in enumerate(tqdm(pe_range, desc=f"{session.code.name:16}")):
        total_errors = 0
        for trial in range(n_trials):
            rng = np.random.default_rng(trial * 1000 + i + 500000)
            bits = rng.integers(0, 2, n_bits)
            codeword, padding = session.encode(bits)
            channel = BinarySymmetricChannel(ChannelConfig(pe=float(pe)), rng=rng)
            decoded = session.decode(channel.transmit(codeword), padding)
            total_errors += int(np.sum(decoded != bits))
        ber[i] = total_errors / (n_bits * n_trials)
    return ber


def main() -> None:
    """Run the sweep and plot the curves."""
    pe_range = np.linspace(0.0, 0.3, 16)

    plt.figure(figsize=(10, 6))
    plt.semilogy(pe_range, simulate_uncoded(pe_range, MESSAGE_BITS, N_TRIALS), "k--", label="Uncoded")

    for order in ORDERS:
        code = rm_build(order)
        ber = simulate_coded(pe_range, order, MESSAGE_BITS, N_TRIALS)
        bound = [block_error_bound(float(pe), code.n, code.correctable) for pe in pe_range]
        (line,) = plt.semilogy(pe_range, ber, "o-", label=f"{code.name} (rate {code_rate(code):.2f})")
        plt.semilogy(pe_range, bound, ":", color=line.get_color(), label=f"{code.name} block error bound")

    plt.xlabel("Channel error probability pe")
    plt.ylabel("Bit error rate")
    plt.title("Majority-logic decoded Reed-Muller codes over a BSC")
    plt.grid(True, which="both", alpha=0.3)
    plt.ylim(1e-6, 1)
    plt.legend()
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
