import abc
import logging

import numpy as np

from metricsbench.config import Config
from metricsbench.generator import current_millis
from metricsbench.rows import RowSequence
from metricsbench.schema import DataType, TableSchema

logger = logging.getLogger(__name__)


class TableDataProvider(abc.ABC):
    """Source of rows for one benchmark table."""

    @abc.abstractmethod
    def init(self):
        ...

    @abc.abstractmethod
    def close(self):
        ...

    @abc.abstractmethod
    def table_schema(self):
        ...

    @abc.abstractmethod
    def rows(self):
        """Return a fresh iterator over ``row_count()`` rows in ``table_schema()`` column order."""

    @abc.abstractmethod
    def row_count(self):
        ...

    def __enter__(self):
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def metrics_table_schema():
    return (
        TableSchema.new_builder("tt_metrics_table")
        .add_timestamp("ts", DataType.TIMESTAMP_MILLISECOND)
        .add_tag("idc", DataType.STRING)
        .add_tag("host", DataType.STRING)
        .add_field("shard", DataType.INT32)
        .add_tag("service", DataType.STRING)
        .add_field("url", DataType.STRING)
        .add_field("cpu_util", DataType.FLOAT64)
        .add_field("memory_util", DataType.FLOAT64)
        .add_field("disk_util", DataType.FLOAT64)
        .add_field("load_util", DataType.FLOAT64)
        .build()
    )


# shard < 1 and shard >= 1 split each host's services over two regions
METRICS_TABLE_PARTITION = ("shard", ["shard < 1", "shard >= 1"])


class MetricsTableDataProvider(TableDataProvider):
    """Infrastructure metrics: idc -> host -> app -> service, each service reporting four utilizations."""

    def __init__(self, row_count=None, service_num_per_app=None, seed=None, clock=current_millis):
        self._table_schema = metrics_table_schema()
        self._row_count = Config.TABLE_ROW_COUNT if row_count is None else row_count
        self._service_num_per_app = Config.SERVICE_NUM_PER_APP if service_num_per_app is None else service_num_per_app
        if seed is None:
            seed = Config.SEED
        self._seed_seq = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
        self._clock = clock

    @property
    def service_num_per_app(self):
        return self._service_num_per_app

    def init(self):
        logger.info(
            "Metrics table provider ready: %d rows, %d services per app",
            self._row_count,
            self._service_num_per_app,
        )

    def close(self):
        logger.debug("Metrics table provider closed")

    def table_schema(self):
        return self._table_schema

    def rows(self):
        # Each sequence gets its own child stream, nothing random is shared between them
        rng = np.random.default_rng(self._seed_seq.spawn(1)[0])
        return RowSequence(rng, self._row_count, self._service_num_per_app, clock=self._clock)

    def row_count(self):
        return self._row_count

    def create_table_sql(self):
        return self._table_schema.to_create_table_sql(partition_on=METRICS_TABLE_PARTITION)
