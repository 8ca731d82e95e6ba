"""Tests for the metrics table data provider."""

import numpy as np
import pytest

from conftest import FIXED_TS
from metricsbench.config import Config
from metricsbench.provider import MetricsTableDataProvider, TableDataProvider
from metricsbench.rows import RowSequence, SequenceState


class TestMetricsTableDataProvider:
    """Tests for the provider contract."""

    @pytest.mark.provider
    def test_is_table_data_provider(self) -> None:
        """MetricsTableDataProvider implements the provider interface."""
        assert isinstance(MetricsTableDataProvider(row_count=1), TableDataProvider)

    @pytest.mark.provider
    def test_init_and_close_are_noops(self) -> None:
        """init() and close() never fail and can be repeated."""
        provider = MetricsTableDataProvider(row_count=5)
        provider.init()
        provider.init()
        provider.close()
        provider.close()

    @pytest.mark.provider
    def test_context_manager(self) -> None:
        """The provider can be used in a with block."""
        with MetricsTableDataProvider(row_count=5, seed=1) as provider:
            assert len(list(provider.rows())) == 5

    @pytest.mark.provider
    def test_row_count_and_schema(self) -> None:
        """row_count() returns the limit and table_schema() the metrics table."""
        provider = MetricsTableDataProvider(row_count=123, service_num_per_app=4)
        assert provider.row_count() == 123
        assert provider.service_num_per_app == 4
        assert provider.table_schema().name == "tt_metrics_table"
        assert provider.table_schema() is provider.table_schema()

    @pytest.mark.provider
    def test_defaults_come_from_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without overrides the provider uses Config."""
        monkeypatch.setattr(Config, "TABLE_ROW_COUNT", 10_000_000_000)
        monkeypatch.setattr(Config, "SERVICE_NUM_PER_APP", 20)
        provider = MetricsTableDataProvider()
        assert provider.row_count() == 10_000_000_000
        assert provider.service_num_per_app == 20

    @pytest.mark.provider
    def test_rows_returns_fresh_lazy_sequence(self) -> None:
        """Each rows() call is a new, unstarted sequence."""
        provider = MetricsTableDataProvider(row_count=10)
        first = provider.rows()
        list(first)
        second = provider.rows()
        assert isinstance(second, RowSequence)
        assert second is not first
        assert second.state is SequenceState.NOT_STARTED
        assert len(list(second)) == 10

    @pytest.mark.provider
    def test_huge_row_count_is_lazy(self) -> None:
        """The default ten billion rows cost nothing until pulled."""
        seq = MetricsTableDataProvider(row_count=10_000_000_000).rows()
        for _ in range(45):
            seq.next_row()
        assert seq.batches_built == 3
        assert seq.has_next()

    @pytest.mark.provider
    def test_seeded_provider_is_reproducible(self) -> None:
        """Two providers with the same seed and clock emit the same rows."""
        a = MetricsTableDataProvider(row_count=30, seed=99, clock=lambda: FIXED_TS)
        b = MetricsTableDataProvider(row_count=30, seed=99, clock=lambda: FIXED_TS)
        assert list(a.rows()) == list(b.rows())

    @pytest.mark.provider
    def test_sequences_get_independent_streams(self) -> None:
        """Successive rows() calls draw from different child streams."""
        provider = MetricsTableDataProvider(row_count=40, seed=99, clock=lambda: FIXED_TS)
        assert list(provider.rows()) != list(provider.rows())

    @pytest.mark.provider
    def test_accepts_seed_sequence(self) -> None:
        """A SeedSequence can be passed as the seed."""
        provider = MetricsTableDataProvider(row_count=3, seed=np.random.SeedSequence(5))
        assert len(list(provider.rows())) == 3

    @pytest.mark.provider
    def test_create_table_sql_is_partitioned_on_shard(self) -> None:
        """The provider's DDL partitions the table by shard."""
        sql = MetricsTableDataProvider(row_count=0).create_table_sql()
        assert "PARTITION ON COLUMNS (shard)" in sql
