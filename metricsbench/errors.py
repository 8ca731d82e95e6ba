class BenchError(Exception):
    """Base class for errors raised by metricsbench."""


class SchemaError(BenchError):
    def __init__(self, table_name, message):
        self.table_name = table_name
        super().__init__(f"{table_name}: {message}")


class RowSequenceExhausted(BenchError, LookupError):
    """Raised when pulling from a row sequence that has already produced its limit."""

    def __init__(self, limit):
        self.limit = limit
        super().__init__(f"row sequence exhausted after {limit} rows")
