from enum import Enum

from metricsbench.errors import RowSequenceExhausted
from metricsbench.generator import BatchBuilder, current_millis


class SequenceState(Enum):
    NOT_STARTED = "not_started"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class RowSequence:
    """Lazy, forward-only sequence of exactly ``limit`` rows.

    Rows are produced one batch (one host, ``services_per_app`` rows) at a time and
    handed out one by one. The row counter decides when to stop, not the batch: when
    ``limit`` is not a multiple of ``services_per_app`` the last batch is only partly
    read and the rest of it is dropped. ``limit`` is never rounded to a batch boundary.

    No batch is built before the first pull, so a sequence with ``limit == 0`` never
    touches its random source.

    Not safe for concurrent pulls. Use one sequence (with its own rng) per thread.
    """

    def __init__(self, rng, limit, services_per_app, clock=current_millis):
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        self._builder = BatchBuilder(rng, services_per_app, clock=clock)
        self._limit = limit
        self._emitted = 0
        self._batch = None

    @property
    def limit(self):
        return self._limit

    @property
    def emitted(self):
        return self._emitted

    @property
    def batches_built(self):
        return self._builder.batches_built

    @property
    def state(self):
        if self._emitted >= self._limit:
            return SequenceState.EXHAUSTED
        if self._batch is None:
            return SequenceState.NOT_STARTED
        return SequenceState.ACTIVE

    def has_next(self):
        return self._emitted < self._limit

    def next_row(self):
        if self._emitted >= self._limit:
            raise RowSequenceExhausted(self._limit)

        self._emitted += 1
        if self._batch is None or not self._batch.has_next():
            self._batch = self._builder.build()

        row = self._batch.next()
        if self._emitted == self._limit:
            # Drop the unread tail of the final batch
            self._batch = None
        return row

    def __iter__(self):
        return self

    def __next__(self):
        if not self.has_next():
            raise StopIteration
        return self.next_row()

    def __repr__(self):
        return f"RowSequence(emitted={self._emitted}, limit={self._limit}, state={self.state.name})"
