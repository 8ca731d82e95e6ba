import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_ROW_COUNT = 10_000_000_000
DEFAULT_SERVICE_NUM_PER_APP = 20
DEFAULT_CONCURRENCY = 4
DEFAULT_LOG_LEVEL = "INFO"


def get_int(name, default, minimum=None, environ=None):
    """Read an integer option, falling back to ``default`` when it is missing or malformed."""
    environ = os.environ if environ is None else environ
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Ignoring malformed %s=%r, using default %s", name, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("Ignoring out of range %s=%s (minimum %s), using default %s", name, value, minimum, default)
        return default
    return value


def get_str(name, default, environ=None):
    environ = os.environ if environ is None else environ
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip()


def get_log_level(name, default, environ=None):
    """Read a logging level name such as ``DEBUG``, falling back to ``default`` for unknown names."""
    value = get_str(name, default, environ=environ).upper()
    # getLevelName maps registered names to their number and anything else to "Level <name>"
    if not isinstance(logging.getLevelName(value), int):
        logger.warning("Ignoring unknown log level %s=%r, using default %s", name, value, default)
        return default
    return value


class Config:
    # Table options
    TABLE_ROW_COUNT = get_int("TABLE_ROW_COUNT", DEFAULT_ROW_COUNT, minimum=0)
    SERVICE_NUM_PER_APP = get_int("TT_METRICS_TABLE_SERVICE_NUM_PER_APP", DEFAULT_SERVICE_NUM_PER_APP, minimum=1)

    # Benchmark options
    SEED = get_int("BENCH_SEED", None, minimum=0)
    CONCURRENCY = get_int("BENCH_CONCURRENCY", DEFAULT_CONCURRENCY, minimum=1)
    LOG_LEVEL = get_log_level("BENCH_LOG_LEVEL", DEFAULT_LOG_LEVEL)

    @classmethod
    def load(cls, environ=None):
        """Re-read every option from ``environ`` (defaults to ``os.environ``)."""
        cls.TABLE_ROW_COUNT = get_int("TABLE_ROW_COUNT", DEFAULT_ROW_COUNT, minimum=0, environ=environ)
        cls.SERVICE_NUM_PER_APP = get_int(
            "TT_METRICS_TABLE_SERVICE_NUM_PER_APP", DEFAULT_SERVICE_NUM_PER_APP, minimum=1, environ=environ
        )
        cls.SEED = get_int("BENCH_SEED", None, minimum=0, environ=environ)
        cls.CONCURRENCY = get_int("BENCH_CONCURRENCY", DEFAULT_CONCURRENCY, minimum=1, environ=environ)
        cls.LOG_LEVEL = get_log_level("BENCH_LOG_LEVEL", DEFAULT_LOG_LEVEL, environ=environ)
        return cls
