"""qna_cleanup."""

from .monitoring.logger import configure_logger

# Configure logger with default settings (just console logging)
# The CLI calls configure_logger again once it knows whether --debug was given
configure_logger()
