"""
Tests for the concurrent safe-prime search.
"""

import io
import threading

import pytest

from picklock.errors import ConfigError, InvalidBitSize, SearchExhausted
from picklock.services.deriver import FactorPair
from picklock.services.prime_race import ConcurrentFactorSearch, ProgressTable, candidate_stream


def _picklock_workers():
    return [t for t in threading.enumerate() if t.name.startswith("picklock-worker-")]


class TestCandidateStream:
    """Tests for the lazy candidate sequence."""

    def test_yields_until_cancelled(self):
        """Test that the stream produces primes and stops on cancellation."""
        cancel = threading.Event()
        stream = candidate_stream(16, cancel)

        first = next(stream)
        assert first.bit_length() == 16

        cancel.set()
        assert list(stream) == []

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()

        assert list(candidate_stream(16, cancel)) == []


class TestConcurrentFactorSearch:
    """Tests for the worker race."""

    def test_finds_safe_prime_factors(self, safe_prime_modulus):
        """Test that factors drawn from a tiny safe prime pool are found."""
        search = ConcurrentFactorSearch(safe_prime_modulus, e=65537, max_iterations=1000, workers_per_offset=2)

        pair = search.run()

        assert {pair.p, pair.q} == {167, 227}
        assert pair.p * pair.q == safe_prime_modulus
        assert not _picklock_workers()

    def test_budget_exhaustion(self, separated_key):
        """Test that the search terminates with SearchExhausted and stops all workers."""
        search = ConcurrentFactorSearch(separated_key.n, e=separated_key.e, max_iterations=30)

        with pytest.raises(SearchExhausted):
            search.run()

        assert search.checked == 30
        assert not _picklock_workers()

    def test_zero_budget(self, separated_key):
        """Test that a zero budget fails without spawning workers."""
        before = threading.active_count()
        search = ConcurrentFactorSearch(separated_key.n, max_iterations=0)

        with pytest.raises(SearchExhausted, match="iteration cap is 0"):
            search.run()

        assert search.checked == 0
        assert threading.active_count() == before

    def test_progress_callback(self, separated_key):
        """Test that progress is reported every 25 distinct candidates."""
        reports = []
        search = ConcurrentFactorSearch(
            separated_key.n,
            max_iterations=60,
            workers_per_offset=1,
            progress=reports.append
        )

        with pytest.raises(SearchExhausted):
            search.run()

        assert reports == [25, 50]

    def test_timeout(self, separated_key):
        """Test that the optional wall-clock ceiling ends the search."""
        search = ConcurrentFactorSearch(separated_key.n, max_iterations=10**9, timeout=0.2)

        with pytest.raises(SearchExhausted):
            search.run()

        assert not _picklock_workers()

    def test_modulus_too_small(self):
        """Test that impossible candidate sizes are rejected up front."""
        search = ConcurrentFactorSearch(15, max_iterations=10)

        with pytest.raises(InvalidBitSize):
            search.run()

    @pytest.mark.parametrize("workers", [0, -1])
    def test_invalid_worker_count(self, separated_key, workers):
        """Test that a search without workers is rejected instead of reporting exhaustion."""
        with pytest.raises(ConfigError):
            ConcurrentFactorSearch(separated_key.n, workers_per_offset=workers)

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_non_positive_timeout(self, separated_key, timeout):
        with pytest.raises(ConfigError):
            ConcurrentFactorSearch(separated_key.n, timeout=timeout)

    def test_huge_modulus_zero_budget(self, huge_modulus):
        search = ConcurrentFactorSearch(huge_modulus, e=65537, max_iterations=0)

        with pytest.raises(SearchExhausted, match="iteration cap is 0"):
            search.run()

    def test_worker_fan_out(self, separated_key):
        """Test the bit sizes requested from workers."""
        search = ConcurrentFactorSearch(separated_key.n)

        target = separated_key.n.bit_length() // 2
        assert search.bit_sizes == [target, target - 1, target - 2]


class TestProgressTable:
    """Tests for the progress table printer."""

    def test_layout(self):
        out = io.StringIO()
        table = ProgressTable(out)

        table.header()
        table(25)
        table.footer(31)

        assert out.getvalue().splitlines() == [
            "[ CHECKED PRIMES ]",
            "| 25             |",
            "| 31             |",
            "| ----FINAL----- |",
        ]


def test_factor_pair_is_tuple():
    assert FactorPair(p=3, q=5) == (3, 5)
