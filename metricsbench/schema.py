from enum import Enum

from metricsbench.errors import SchemaError


class DataType(Enum):
    TIMESTAMP_MILLISECOND = "TIMESTAMP(3)"
    STRING = "STRING"
    INT32 = "INT"
    FLOAT64 = "DOUBLE"

    @property
    def python_type(self):
        return _PYTHON_TYPES[self]


_PYTHON_TYPES = {
    DataType.TIMESTAMP_MILLISECOND: int,
    DataType.STRING: str,
    DataType.INT32: int,
    DataType.FLOAT64: float,
}


class SemanticType(Enum):
    TIMESTAMP = "timestamp"
    TAG = "tag"
    FIELD = "field"


class Column:
    __slots__ = ("name", "semantic_type", "data_type")

    def __init__(self, name, semantic_type, data_type):
        self.name = name
        self.semantic_type = semantic_type
        self.data_type = data_type

    def __eq__(self, other):
        if not isinstance(other, Column):
            return NotImplemented
        return (self.name, self.semantic_type, self.data_type) == (other.name, other.semantic_type, other.data_type)

    def __hash__(self):
        return hash((self.name, self.semantic_type, self.data_type))

    def __repr__(self):
        return f"Column({self.name!r}, {self.semantic_type.name}, {self.data_type.name})"


class TableSchema:
    """Immutable, ordered column layout of a table.

    Every row handed out for this table must list its values in ``columns()`` order.
    The schema itself never looks at rows.
    """

    def __init__(self, name, columns):
        self._name = name
        self._columns = tuple(columns)

    @staticmethod
    def new_builder(name):
        return TableSchemaBuilder(name)

    @property
    def name(self):
        return self._name

    def columns(self):
        return self._columns

    def column_names(self):
        return [c.name for c in self._columns]

    def time_index(self):
        return next(c for c in self._columns if c.semantic_type is SemanticType.TIMESTAMP)

    def tags(self):
        return [c for c in self._columns if c.semantic_type is SemanticType.TAG]

    def __len__(self):
        return len(self._columns)

    def __repr__(self):
        return f"TableSchema({self._name!r}, {list(self._columns)!r})"

    def to_create_table_sql(self, partition_on=None, append_mode=True):
        """Render a ``CREATE TABLE`` statement for GreptimeDB.

        Tags become the primary key and get an inverted index. ``partition_on`` is an
        optional ``(column, [rule, ...])`` pair, e.g. ``("shard", ["shard < 1", "shard >= 1"])``.
        """
        lines = []
        for col in self._columns:
            if col.semantic_type is SemanticType.TIMESTAMP:
                lines.append(f"    `{col.name}` {col.data_type.value} NOT NULL")
            elif col.semantic_type is SemanticType.TAG:
                lines.append(f"    `{col.name}` {col.data_type.value} NULL INVERTED INDEX")
            elif col.data_type is DataType.INT32:
                lines.append(f"    `{col.name}` {col.data_type.value}")
            else:
                lines.append(f"    `{col.name}` {col.data_type.value} NULL")

        lines.append(f"    TIME INDEX (`{self.time_index().name}`)")
        tags = self.tags()
        if tags:
            lines.append("    PRIMARY KEY (" + ", ".join(f"`{t.name}`" for t in tags) + ")")

        sql = f"CREATE TABLE IF NOT EXISTS `{self._name}` (\n" + ",\n".join(lines) + "\n)"
        if partition_on is not None:
            column, rules = partition_on
            if column not in self.column_names():
                raise SchemaError(self._name, f"cannot partition on unknown column '{column}'")
            sql += f"\nPARTITION ON COLUMNS ({column}) (\n" + ",\n".join(f"    {r}" for r in rules) + "\n)"
        sql += "\nENGINE=mito"
        if append_mode:
            sql += "\nWITH(\n    append_mode = 'true'\n)"
        return sql + ";"


class TableSchemaBuilder:
    def __init__(self, name):
        self._name = name
        self._columns = []

    def add_timestamp(self, name, data_type=DataType.TIMESTAMP_MILLISECOND):
        return self._add(name, SemanticType.TIMESTAMP, data_type)

    def add_tag(self, name, data_type=DataType.STRING):
        return self._add(name, SemanticType.TAG, data_type)

    def add_field(self, name, data_type):
        return self._add(name, SemanticType.FIELD, data_type)

    def _add(self, name, semantic_type, data_type):
        self._columns.append(Column(name, semantic_type, data_type))
        return self

    def build(self):
        seen = set()
        for col in self._columns:
            if col.name in seen:
                raise SchemaError(self._name, f"duplicate column name '{col.name}'")
            seen.add(col.name)

        timestamps = [c.name for c in self._columns if c.semantic_type is SemanticType.TIMESTAMP]
        if len(timestamps) != 1:
            raise SchemaError(self._name, f"expected exactly one timestamp column, got {len(timestamps)}")

        return TableSchema(self._name, self._columns)
