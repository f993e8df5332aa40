import structlog
import logging
from .config import Settings, EnvironmentType

def setup_logging(settings: Settings) -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.ENVIRONMENT == EnvironmentType.DEVELOPMENT:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    if settings.ENVIRONMENT == EnvironmentType.PRODUCTION:
        level = logging.INFO
    else:
        level = logging.getLevelName(settings.LOG_LEVEL.upper())
        if not isinstance(level, int):
            level = logging.DEBUG

    structlog.configure(
        processors=processors,
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # Captured stdout is swapped per test; cached loggers would keep a stale stream.
        cache_logger_on_first_use=settings.ENVIRONMENT != EnvironmentType.TESTING,
    )
