"""
Concurrent safe-prime guessing.

Worker threads generate random safe primes of roughly half the modulus
size and push them onto a shared queue. The calling thread is the only
consumer: it deduplicates candidates, charges each distinct one against
the iteration budget and checks whether it divides the modulus.

NOTE: this is a prototype. There are far too many primes of the right
size for guessing to succeed against a properly generated key; it only
finds factors drawn from a tiny pool (toy key sizes, broken generators).
"""

import logging
import queue
import sys
import threading
import time
from typing import Callable, Iterator, List, Optional, Sequence, TextIO

from picklock.config import BIT_OFFSETS, DEFAULT_MAX_ITERATIONS, REPORT_EVERY
from picklock.crypto import MIN_SAFE_PRIME_BITS, format_int, generate_safe_prime, is_probable_prime
from picklock.errors import ConfigError, InvalidBitSize, SearchCancelled, SearchExhausted
from picklock.services.deriver import FactorPair

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


def candidate_stream(bits: int, cancel: threading.Event) -> Iterator[int]:
    """
    Lazily yield safe primes of `bits` bits until `cancel` is set.

    The token is checked before every generation and polled by the
    generator itself, so a set token ends the stream promptly.
    """
    while not cancel.is_set():
        try:
            yield generate_safe_prime(bits, cancel)
        except SearchCancelled:
            return
        except (ValueError, ArithmeticError) as e:
            logger.debug(f"Candidate generation of {bits} bits failed: {e}")


def _produce(bits: int, cancel: threading.Event, candidates: "queue.Queue[int]") -> None:
    """Worker body: forward every generated prime to the shared queue."""
    for prime in candidate_stream(bits, cancel):
        # unbounded queue, a late put after the consumer stopped never blocks
        candidates.put(prime)
    logger.debug(f"{threading.current_thread().name} stopped")


class ProgressTable:
    """Prints the number of checked primes as a one-column table."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def header(self) -> None:
        print("[ {0: <14} ]".format("CHECKED PRIMES"), file=self.stream)

    def __call__(self, checked: int) -> None:
        print("| {0: <14} |".format(checked), file=self.stream)

    def footer(self, checked: int) -> None:
        self(checked)
        print("| {0: <14} |".format("----FINAL-----"), file=self.stream)


class ConcurrentFactorSearch:
    """
    Multi-producer, single-consumer race for a factor of n.

    SeenSet and the budget counter are locals of the consuming thread;
    workers only ever see the cancellation event and the queue.
    """

    def __init__(
        self,
        n: int,
        e: int = 0,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        workers_per_offset: int = 4,
        offsets: Sequence[int] = BIT_OFFSETS,
        progress: Optional[ProgressCallback] = None,
        timeout: Optional[float] = None,
        poll_interval: float = 0.05,
    ):
        if workers_per_offset < 1:
            raise ConfigError(f"workers per offset must be at least 1, got {workers_per_offset}")
        if timeout is not None and timeout <= 0:
            raise ConfigError(f"search timeout must be positive, got {timeout}")
        self.n = n
        self.e = e
        self.max_iterations = max_iterations
        self.workers_per_offset = workers_per_offset
        self.offsets = tuple(offsets)
        self.progress = progress
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.checked = 0
        self._workers: List[threading.Thread] = []

    @property
    def bit_sizes(self) -> List[int]:
        """Candidate bit lengths, one per offset."""
        target_bits = self.n.bit_length() // 2
        return [target_bits - offset for offset in self.offsets]

    def run(self) -> FactorPair:
        """
        Race the workers until a factor pair is confirmed or the budget runs out.

        Raises:
            SearchExhausted: If no pair was accepted within the budget
            InvalidBitSize: If the modulus is too small to guess safe primes for
        """
        self.checked = 0
        if self.max_iterations <= 0:
            raise SearchExhausted(
                f"cannot crack the private exponent of the given n {format_int(self.n)} and e {format_int(self.e)}: "
                f"iteration cap is 0"
            )

        sizes = self.bit_sizes
        if min(sizes) < MIN_SAFE_PRIME_BITS:
            raise InvalidBitSize(
                f"modulus of {self.n.bit_length()} bits is too small, "
                f"candidate size {min(sizes)} is below {MIN_SAFE_PRIME_BITS} bits"
            )

        cancel = threading.Event()
        candidates: "queue.Queue[int]" = queue.Queue()
        self._spawn(sizes, cancel, candidates)
        logger.info(
            f"Started {len(self._workers)} workers for sizes {sizes}, "
            f"budget {self.max_iterations}"
        )

        try:
            pair = self._consume(candidates)
        finally:
            cancel.set()
            for worker in self._workers:
                worker.join()
            self._workers = []
            logger.debug("All workers joined")

        if pair is None:
            raise SearchExhausted(
                f"cannot crack the private exponent of the given n {format_int(self.n)} and e {format_int(self.e)}"
            )
        logger.info(f"Factor found after {self.checked} distinct candidates")
        return pair

    def _spawn(self, sizes: Sequence[int], cancel: threading.Event, candidates: "queue.Queue[int]") -> None:
        for index in range(self.workers_per_offset):
            for bits in sizes:
                worker = threading.Thread(
                    target=_produce,
                    args=(bits, cancel, candidates),
                    name=f"picklock-worker-{bits}-{index}",
                    daemon=True,
                )
                worker.start()
                self._workers.append(worker)

    def _consume(self, candidates: "queue.Queue[int]") -> Optional[FactorPair]:
        seen = set()
        deadline = time.monotonic() + self.timeout if self.timeout is not None else None

        while True:
            if deadline is not None and time.monotonic() >= deadline:
                logger.info(f"Search timed out after {self.timeout}s")
                return None

            try:
                prime = candidates.get(timeout=self.poll_interval)
            except queue.Empty:
                # no candidate this round
                if not any(worker.is_alive() for worker in self._workers):
                    logger.warning("All workers exited without cancellation")
                    return None
                continue

            if prime in seen:
                continue
            seen.add(prime)
            if len(seen) > self.max_iterations:
                logger.info(f"Budget of {self.max_iterations} candidates exhausted")
                return None

            self.checked = len(seen)
            if self.progress is not None and self.checked % REPORT_EVERY == 0:
                self.progress(self.checked)

            q = self.n // prime
            if prime * q != self.n:
                continue
            if is_probable_prime(q):
                return FactorPair(p=prime, q=q)
