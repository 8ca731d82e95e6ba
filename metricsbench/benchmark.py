import logging
import threading
import time

import numpy as np

from metricsbench.provider import MetricsTableDataProvider

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10_000


def drain(sequence, max_rows=None):
    """Pull rows until the sequence is exhausted (or ``max_rows`` is hit). Returns (rows, seconds)."""
    start = time.perf_counter()
    pulled = 0
    while sequence.has_next() and (max_rows is None or pulled < max_rows):
        sequence.next_row()
        pulled += 1
    return pulled, time.perf_counter() - start


class GenerationBenchmark:
    """Measures row generation throughput with one independent provider per worker thread.

    Workers never share a random source: each gets a child of one SeedSequence, so a
    seeded run reproduces the same rows per worker.
    """

    def __init__(self, provider_factory=MetricsTableDataProvider, concurrency=1, rows_per_worker=1_000_000,
                 service_num_per_app=None, chunk_size=DEFAULT_CHUNK_SIZE, seed=None):
        if concurrency < 1:
            raise ValueError(f"concurrency must be positive, got {concurrency}")
        self.provider_factory = provider_factory
        self.concurrency = concurrency
        self.rows_per_worker = rows_per_worker
        self.service_num_per_app = service_num_per_app
        self.chunk_size = chunk_size
        self.seed = seed

    def _run_worker(self, provider, index, results, progress):
        metrics = {
            'rows': 0,
            'elapsed': 0.0,
            'latencies': [],  # seconds per chunk
            'errors': 0,
            'error': None
        }
        start = time.perf_counter()
        try:
            with provider:
                sequence = provider.rows()
                while sequence.has_next():
                    rows, latency = drain(sequence, self.chunk_size)
                    metrics['rows'] += rows
                    metrics['latencies'].append(latency)
                    # Only this worker writes its slot, the monitor just sums them
                    progress[index] += rows
        except Exception as e:
            metrics['errors'] += 1
            metrics['error'] = f"{type(e).__name__}: {e}"
            logger.exception("Worker %d failed after %d rows", index, metrics['rows'])
        finally:
            metrics['elapsed'] = time.perf_counter() - start
            results[index] = metrics
        logger.debug("Worker %d produced %d rows in %.2fs", index, metrics['rows'], metrics['elapsed'])

    def run(self, on_progress=None, poll_interval=0.5):
        seeds = np.random.SeedSequence(self.seed).spawn(self.concurrency)
        providers = [
            self.provider_factory(row_count=self.rows_per_worker, service_num_per_app=self.service_num_per_app,
                                  seed=s)
            for s in seeds
        ]

        results = [None] * self.concurrency
        progress = [0] * self.concurrency
        threads = []
        logger.info("Generating %d rows on %d workers", self.rows_per_worker * self.concurrency, self.concurrency)

        start = time.perf_counter()
        for i, provider in enumerate(providers):
            t = threading.Thread(target=self._run_worker, args=(provider, i, results, progress),
                                 name=f"gen-worker-{i}")
            threads.append(t)
            t.start()

        while any(t.is_alive() for t in threads):
            if on_progress is not None:
                on_progress(sum(progress), time.perf_counter() - start)
            time.sleep(poll_interval)

        for t in threads:
            t.join()

        summary = summarize(results, time.perf_counter() - start)
        if summary['errors']:
            logger.error("%d of %d workers failed", summary['errors'], self.concurrency)
        return summary


def summarize(results, wall_time):
    """Aggregate per-worker metrics into totals, rows/s and chunk latency percentiles (ms).

    A worker with no result at all counts as an error.
    """
    total_rows = 0
    errors = 0
    latencies = []
    for r in results:
        if not r:
            errors += 1
            continue
        total_rows += r['rows']
        errors += r.get('errors', 0)
        latencies.extend(r['latencies'])

    summary = {
        'workers': len(results),
        'rows': total_rows,
        'errors': errors,
        'wall_time': wall_time,
        'rows_per_sec': total_rows / wall_time if wall_time > 0 else 0.0,
        'p50_ms': 0.0,
        'p95_ms': 0.0,
        'p99_ms': 0.0,
    }
    if latencies:
        a = np.array(latencies) * 1000  # to ms
        summary['p50_ms'] = float(np.percentile(a, 50))
        summary['p95_ms'] = float(np.percentile(a, 95))
        summary['p99_ms'] = float(np.percentile(a, 99))
    return summary
