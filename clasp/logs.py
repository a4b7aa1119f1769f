"""
clasp logging sink.

Every diagnostic the engine produces (input errors, configuration errors and
warnings, the ignored-arguments notice) flows through log(). A schema filters
messages below its log_level and may replace the sink with its own
log_handler(level, message); otherwise the default sink prints leveled lines
with rich: INFO on stdout, everything else on stderr.
"""
from enum import IntEnum

from rich.console import Console
from rich.text import Text

stdout = Console(highlight=False, soft_wrap=True)
stderr = Console(stderr=True, highlight=False, soft_wrap=True)


class LogLevel(IntEnum):
    """
    ordered log levels; a schema drops every message below its threshold.
    """
    INFO           = 0
    WARNING        = 1
    ERROR          = 2
    CONFIG_WARNING = 3
    CONFIG_ERROR   = 4
    NO_LOGS        = 5  # threshold only: disables every message

    @property
    def tag(self):
        return "[%s]" % self.name


_styles = {
    LogLevel.INFO: "bold #36C5F0",
    LogLevel.WARNING: "bold #FFB400",
    LogLevel.ERROR: "bold #FF4DA6",
    LogLevel.CONFIG_WARNING: "bold #FFC2E0",
    LogLevel.CONFIG_ERROR: "bold #EF4444",
}


def emit(level, message, /):
    """
    default sink: write one tagged line to the matching console.
    """
    if level >= LogLevel.NO_LOGS:
        return
    console = stdout if level == LogLevel.INFO else stderr
    console.print(Text.assemble((LogLevel(level).tag, _styles[level]), " ", message))


def log(schema, level, message, /):
    """
    route a message through the schema's threshold and handler.

    a missing schema (None) logs unconditionally through the default sink.
    """
    if schema is not None and level < schema.log_level:
        return
    handler = schema.log_handler if schema is not None and schema.log_handler else emit
    handler(level, message)


__all__ = (
    "LogLevel",
    "emit",
    "log",
)
