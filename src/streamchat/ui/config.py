"""UI configuration constants.

Centralizes magic numbers and configuration values for the UI module.
"""

import logging


class LogLevel:
    """Log level constants with numeric values for comparison.

    Values match the standard logging module so records can be
    filtered without translation.
    """

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Streaming configuration
STREAM_BUFFER_THRESHOLD = 50  # Characters before redrawing the pending message

# Input history configuration
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history

# Log panel configuration
LOG_TIMESTAMP_FORMAT = "%H:%M:%S"
LOG_MAX_MESSAGE_LENGTH = 500  # Characters before truncating log messages

# Sidebar configuration
SIDEBAR_TITLE_MAX_LENGTH = 28  # Characters before truncating conversation titles

# Placeholder shown in the empty chat view
WELCOME_TEXT = (
    "# Streamchat\n\n"
    "You can ask me about anything, I might or might not have a good answer, "
    "but you can still ask.\n\n"
    "Ctrl+J sends, Ctrl+N starts a new chat, Ctrl+S opens prompt settings."
)
