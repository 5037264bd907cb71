import json
import logging
import sys

import loguru
from loguru import logger

AZURE_LOGGER_NAMES = (
    "azure",
    "azure.identity",
    "azure.core",
    "azure.core.pipeline.policies",
)


class InterceptHandler(logging.Handler):
    """Forward records from the standard logging module (used by the Azure SDK) to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller that originated the logged message
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        # bind() rather than kwargs: SDK messages often contain JSON braces
        logger.bind(sdk_logger=record.name).opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


_intercept_handler = InterceptHandler()


# Loggers configuration runs on import of the package and again from the CLI -- src/qna_cleanup/__init__.py
def configure_logger(debug: bool = False):
    """
    Configure loguru logger with a single colored console sink.

    Args:
        debug: Log at DEBUG level and forward the Azure SDK's own diagnostics
            (HTTP requests, retries, credential lookups) to the console
    """
    _configure_azure_loggers(debug)

    logger.remove()  # remove the default logger

    logger.add(
        sink=sys.stderr,
        diagnose=False,
        level="DEBUG" if debug else "INFO",
        colorize=None,  # colors only when stderr is a terminal
        format="<level>{level: <8}</level> | <level>{message}</level> <dim>{extra}</dim>",
        filter=process_log_record,
    )


def _configure_azure_loggers(debug: bool) -> None:
    """Route Azure SDK logging through loguru when debugging, otherwise keep it quiet."""
    for name in AZURE_LOGGER_NAMES:
        sdk_logger = logging.getLogger(name)
        if debug:
            sdk_logger.setLevel(logging.DEBUG)
        else:
            # Suppress verbose Azure SDK logging
            sdk_logger.setLevel(logging.WARNING if name == "azure" else logging.ERROR)

    root_azure_logger = logging.getLogger("azure")
    if _intercept_handler not in root_azure_logger.handlers:
        root_azure_logger.addHandler(_intercept_handler)
    root_azure_logger.propagate = False


def process_log_record(record: "loguru.Record") -> bool:
    """
    Serialize the "extra" field to JSON before the record reaches the formatter.

    The JSON renders on the same line as the message; records without extra fields
    get an empty string so no stray "{}" is printed.
    """
    extra = record["extra"]
    record["extra"] = json.dumps(extra, default=str) if extra else ""
    return True
