"""Tests for the majority-logic decoder."""

import time
from itertools import combinations

import numpy as np
import pytest

from rmcoding.decoding import decode_blocks, rm_decode, rm_iter_decode, run_stage
from rmcoding.encoding import rm_encode
from rmcoding.errors import DimensionMismatchError, InvalidParameterError, LengthMismatchError
from rmcoding.matrices import DecodingStage, LinearCode, hamming_build, rm_build

MESSAGE_1011 = np.array([1, 0, 1, 1])
NUM_BLOCKS = 40


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(42)


def _encode(code: LinearCode, message: np.ndarray) -> np.ndarray:
    return rm_encode(message, code.k, code.n, code.generator)


def _decode(code: LinearCode, received: np.ndarray) -> np.ndarray:
    return rm_decode(received, code.stages, code.k, code.n)


class TestCleanChannel:
    """Decoding without channel errors is exact."""

    @pytest.mark.parametrize(("order", "degree"), [(1, 1), (2, 1), (3, 1), (4, 2), (5, 1), (5, 3), (6, 2)])
    def test_round_trip(self, order: int, degree: int, rng: np.random.Generator) -> None:
        """decode(encode(m)) == m."""
        code = rm_build(order, degree)
        message = rng.integers(0, 2, size=NUM_BLOCKS * code.k)
        np.testing.assert_array_equal(_decode(code, _encode(code, message)), message)

    @pytest.mark.parametrize("parity_bits", [2, 3, 4])
    def test_hamming_round_trip(self, parity_bits: int, rng: np.random.Generator) -> None:
        """Hamming codes decode clean codewords exactly."""
        code = hamming_build(parity_bits)
        message = rng.integers(0, 2, size=NUM_BLOCKS * code.k)
        np.testing.assert_array_equal(_decode(code, _encode(code, message)), message)

    def test_output_length(self, rng: np.random.Generator) -> None:
        """Output length is (len / n) * k."""
        code = rm_build(4)
        received = rng.integers(0, 2, size=NUM_BLOCKS * code.n)
        np.testing.assert_equal(len(_decode(code, received)), NUM_BLOCKS * code.k)

    def test_empty_stream(self) -> None:
        """An empty stream decodes to an empty stream."""
        code = rm_build(3)
        np.testing.assert_equal(len(_decode(code, np.zeros(0, dtype=int))), 0)


class TestErrorCorrection:
    """Errors within the correction radius are always corrected."""

    def test_hamming74_single_error(self) -> None:
        """Flipping any one bit of 1011010 still decodes to 1011."""
        code = hamming_build()
        codeword = _encode(code, MESSAGE_1011)
        for position in range(code.n):
            received = codeword.copy()
            received[position] ^= 1
            np.testing.assert_array_equal(_decode(code, received), MESSAGE_1011)

    def test_hamming74_double_error_completes(self) -> None:
        """Two flipped bits may decode wrongly but never raise."""
        code = hamming_build()
        codeword = _encode(code, MESSAGE_1011)
        for positions in combinations(range(code.n), 2):
            received = codeword.copy()
            received[list(positions)] ^= 1
            decoded = _decode(code, received)
            np.testing.assert_equal(len(decoded), code.k)

    def test_rm13_single_error(self) -> None:
        """RM(1, 3) corrects any single error in 11000011."""
        code = rm_build(3)
        codeword = _encode(code, MESSAGE_1011)
        for position in range(code.n):
            received = codeword.copy()
            received[position] ^= 1
            np.testing.assert_array_equal(_decode(code, received), MESSAGE_1011)

    @pytest.mark.parametrize(("order", "degree"), [(4, 1), (4, 2), (5, 1), (5, 2), (6, 1)])
    def test_errors_within_radius(self, order: int, degree: int, rng: np.random.Generator) -> None:
        """Up to t random errors per block are corrected."""
        code = rm_build(order, degree)
        message = rng.integers(0, 2, size=NUM_BLOCKS * code.k)
        received = _encode(code, message).reshape(-1, code.n)
        for block in received:
            block[rng.choice(code.n, size=code.correctable, replace=False)] ^= 1
        np.testing.assert_array_equal(_decode(code, received.reshape(-1)), message)

    @pytest.mark.parametrize("parity_bits", [3, 4, 5])
    def test_hamming_single_errors(self, parity_bits: int, rng: np.random.Generator) -> None:
        """Hamming codes correct one random error per block."""
        code = hamming_build(parity_bits)
        message = rng.integers(0, 2, size=NUM_BLOCKS * code.k)
        received = _encode(code, message).reshape(-1, code.n)
        received[np.arange(NUM_BLOCKS), rng.integers(0, code.n, size=NUM_BLOCKS)] ^= 1
        np.testing.assert_array_equal(_decode(code, received.reshape(-1)), message)

    def test_beyond_radius_completes(self, rng: np.random.Generator) -> None:
        """Heavily corrupted blocks decode to some k-bit message without raising."""
        code = rm_build(4)
        received = rng.integers(0, 2, size=NUM_BLOCKS * code.n)
        decoded = _decode(code, received)
        np.testing.assert_equal(len(decoded), NUM_BLOCKS * code.k)
        if not np.all((decoded == 0) | (decoded == 1)):
            pytest.fail("Decoder produced non-binary output")

    def test_block_independence(self, rng: np.random.Generator) -> None:
        """Corrupting one block does not change the decoding of the others."""
        code = rm_build(4)
        message = rng.integers(0, 2, size=NUM_BLOCKS * code.k)
        received = _encode(code, message)
        received[: code.n] = rng.integers(0, 2, size=code.n)
        decoded = _decode(code, received)
        np.testing.assert_array_equal(decoded[code.k :], message[code.k :])


class TestStages:
    """Stage-level behaviour, including ties."""

    def test_tie_decides_zero(self) -> None:
        """RM(1, 2): a single error at position 0 splits every first-order vote."""
        code = rm_build(2)
        received = np.array([[1, 0, 0, 0]], dtype=np.uint8)
        result = run_stage(received, code.stages[0])
        np.testing.assert_array_equal(result.votes, [[1, 1]])
        np.testing.assert_array_equal(result.ties, [[True, True]])
        np.testing.assert_array_equal(result.decisions, [[0, 0]])
        np.testing.assert_array_equal(result.residual, received)

    def test_ties_counted(self) -> None:
        """decode_blocks reports tied votes without raising."""
        code = rm_build(2)
        message, num_ties = decode_blocks(np.array([[1, 0, 0, 0]], dtype=np.uint8), code.stages, code.k)
        np.testing.assert_array_equal(message, [[0, 0, 0]])
        np.testing.assert_equal(num_ties, 2)

    def test_residual_subtracts_decided_rows(self) -> None:
        """After the first-order stage of RM(1, 3) only the constant term remains."""
        code = rm_build(3)
        codeword = _encode(code, MESSAGE_1011).reshape(1, -1)
        result = run_stage(codeword, code.stages[0])
        np.testing.assert_array_equal(result.decisions, [[0, 1, 1]])
        np.testing.assert_array_equal(result.residual, np.ones((1, code.n)))

    def test_stage_majority(self) -> None:
        """Strict majority of ones decides 1."""
        code = rm_build(3)
        received = np.array([[0, 1, 0, 1, 0, 1, 0, 0]], dtype=np.uint8)
        result = run_stage(received, code.stages[0])
        np.testing.assert_array_equal(result.votes[0, 0], 3)
        np.testing.assert_array_equal(result.decisions[0, 0], 1)


class TestLargeCodes:
    """Decoding cost grows with the stored check positions, not with n squared."""

    def test_rm1_10_errors_within_radius(self, rng: np.random.Generator) -> None:
        """RM(1, 10) corrects t = 255 random errors per block."""
        code = rm_build(10)
        message = rng.integers(0, 2, size=8 * code.k)
        received = _encode(code, message).reshape(-1, code.n)
        for block in received:
            block[rng.choice(code.n, size=code.correctable, replace=False)] ^= 1
        np.testing.assert_array_equal(_decode(code, received.reshape(-1)), message)

    def test_rm1_10_decode_time(self, rng: np.random.Generator) -> None:
        """500 blocks of RM(1, 10) decode well within two seconds once compiled."""
        code = rm_build(10)
        received = rng.integers(0, 2, size=500 * code.n)
        _decode(code, received[: code.n])

        start = time.perf_counter()
        _decode(code, received)
        elapsed = time.perf_counter() - start
        if elapsed > 2.0:
            pytest.fail(f"Decoding 500 RM(1,10) blocks took {elapsed:.2f} s")


class TestChunkedDecoding:
    """Lazy chunked decoding."""

    def test_chunks_match_full_decode(self, rng: np.random.Generator) -> None:
        """Chunks hold whole message blocks and concatenate to the full output."""
        code = rm_build(3)
        received = rng.integers(0, 2, size=NUM_BLOCKS * code.n)
        chunks = list(rm_iter_decode(received, code.stages, code.k, code.n, chunk_blocks=6))
        for chunk in chunks[:-1]:
            np.testing.assert_equal(len(chunk), 6 * code.k)
        np.testing.assert_array_equal(np.concatenate(chunks), _decode(code, received))

    def test_validation_is_eager(self) -> None:
        """Invalid input fails when the iterator is created."""
        code = rm_build(3)
        with pytest.raises(LengthMismatchError):
            rm_iter_decode(np.ones(9, dtype=int), code.stages, code.k, code.n)


class TestDecodingErrors:
    """Eager input validation."""

    @pytest.mark.parametrize("length", [1, 7, 9, 15])
    def test_length_mismatch(self, length: int) -> None:
        """Received length not a multiple of n raises LengthMismatchError."""
        code = rm_build(3)
        with pytest.raises(LengthMismatchError):
            _decode(code, np.ones(length, dtype=int))

    def test_stages_from_other_code(self) -> None:
        """Control matrices of a different code are rejected."""
        code = rm_build(3)
        other = rm_build(4)
        with pytest.raises(DimensionMismatchError):
            rm_decode(np.zeros(code.n, dtype=int), other.stages, code.k, code.n)

    def test_incomplete_stages(self) -> None:
        """Stages must decide all k message bits."""
        code = rm_build(3)
        with pytest.raises(DimensionMismatchError):
            rm_decode(np.zeros(code.n, dtype=int), code.stages[:1], code.k, code.n)
        with pytest.raises(DimensionMismatchError):
            rm_decode(np.zeros(code.n, dtype=int), (), code.k, code.n)

    def test_malformed_stage(self) -> None:
        """Contribution rows must match the stage's coefficients."""
        code = rm_build(3)
        stage = code.stages[0]
        broken = DecodingStage(
            index=stage.index,
            rows=stage.rows,
            positions=stage.positions,
            contribution=stage.contribution[:1],
        )
        with pytest.raises(DimensionMismatchError):
            rm_decode(np.zeros(code.n, dtype=int), (broken, code.stages[1]), code.k, code.n)

    def test_positions_outside_block(self) -> None:
        """Check positions past the end of a block are rejected before decoding."""
        code = rm_build(3)
        stage = code.stages[0]
        positions = stage.positions.copy()
        positions[0, 0, 1] = code.n
        broken = DecodingStage(
            index=stage.index,
            rows=stage.rows,
            positions=positions,
            contribution=stage.contribution,
        )
        with pytest.raises(DimensionMismatchError):
            rm_decode(np.zeros(code.n, dtype=int), (broken, code.stages[1]), code.k, code.n)

    def test_non_binary_input(self) -> None:
        """Received streams must only contain 0 and 1."""
        code = rm_build(3)
        with pytest.raises(InvalidParameterError):
            _decode(code, np.full(code.n, 2))
