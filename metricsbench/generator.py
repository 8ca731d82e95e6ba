import logging
import time
import zlib
from typing import NamedTuple

logger = logging.getLogger(__name__)

IDC_NUM = 20
HOST_NUM_PER_IDC = 500  # 20 idcs x 500 hosts = 10,000 hosts
APP_NUM = 500
URL_ID_NUM = 2000
METRIC_NUM = 4  # cpu, memory, disk, load
METRIC_MAX = 100.0
MILLIS_PER_MINUTE = 60_000


def current_millis():
    return time.time_ns() // 1_000_000


def next_idc(rng, idc_num=IDC_NUM):
    return f"idc_{rng.integers(idc_num)}"


def next_host(rng, idc, host_num_per_idc=HOST_NUM_PER_IDC):
    # The idc prefix keeps host names unique across idcs
    return f"{idc}_host_{rng.integers(host_num_per_idc)}"


def next_app(host, app_num=APP_NUM):
    """Map a host to its app. A host always runs the same app, so this is CRC-32 of the name, not a draw."""
    return f"app_{zlib.crc32(host.encode('utf-8')) % app_num}"


def next_service(app, index):
    return f"{app}_service_{index}"


def next_url(rng, ts):
    minutes = ts // MILLIS_PER_MINUTE
    return f"http://127.0.0.1/helloworld/{minutes}/{rng.integers(URL_ID_NUM)}"


class GenerationContext(NamedTuple):
    ts: int
    idc: str
    host: str
    app: str
    url: str


class Batch:
    """Rows generated together for one host, read front to back."""

    __slots__ = ("context", "rows", "cursor")

    def __init__(self, context, rows):
        self.context = context
        self.rows = rows
        self.cursor = 0

    def has_next(self):
        return self.cursor < len(self.rows)

    def next(self):
        row = self.rows[self.cursor]
        self.cursor += 1
        return row

    def __len__(self):
        return len(self.rows)


class BatchBuilder:
    def __init__(self, rng, services_per_app, clock=current_millis):
        if services_per_app < 1:
            raise ValueError(f"services_per_app must be positive, got {services_per_app}")
        self.rng = rng
        self.services_per_app = services_per_app
        self.clock = clock
        self.batches_built = 0

    def next_context(self):
        ts = int(self.clock())
        idc = next_idc(self.rng)
        host = next_host(self.rng, idc)
        app = next_app(host)
        url = next_url(self.rng, ts)
        return GenerationContext(ts, idc, host, app, url)

    def build(self):
        ctx = self.next_context()
        metrics = self.rng.random((self.services_per_app, METRIC_NUM)) * METRIC_MAX

        # All services on a host report at the same moment, so they share the context
        rows = []
        for i in range(self.services_per_app):
            cpu, memory, disk, load = metrics[i].tolist()
            rows.append((
                ctx.ts,
                ctx.idc,
                ctx.host,
                i,
                next_service(ctx.app, i),
                ctx.url,
                cpu,
                memory,
                disk,
                load,
            ))

        self.batches_built += 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Built batch #%d for %s (%d rows, ts=%d)", self.batches_built, ctx.host, len(rows), ctx.ts)
        return Batch(ctx, rows)

