"""structlog configuration for mkacct.

Two outputs per run:
- Sink: one plain-text line per record, ``[timestamp] [LEVEL] [component]
  message``, appended to the run's log file (or stdout when no file could
  be created).
- Echo: a Rich-styled copy on the terminal for every record when verbose,
  otherwise for every record that is not INFO.

Sink location fallback: primary directory -> fallback directory (system
temp dir by default) -> stdout. Logging problems never abort a run.
"""

from __future__ import annotations

import logging
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from rich.markup import escape

from mkacct.output.console import MessageClass, style_for

if TYPE_CHECKING:
    from mkacct.config.models import LogConfig
    from mkacct.output.console import Renderer

LOGGER_NAME = "mkacct"
DEFAULT_COMPONENT = "MAIN"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_LINE_KEYS = frozenset({"timestamp", "level", "component", "event", "exception"})


# ---------------------------------------------------------------------------
# Processors
# ---------------------------------------------------------------------------


def add_default_component(
    _logger: Any, _method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Tag records that were logged without a component."""
    event_dict.setdefault("component", DEFAULT_COMPONENT)
    return event_dict


def render_log_line(_logger: Any, _method_name: str, event_dict: structlog.types.EventDict) -> str:
    """Render ``[timestamp] [LEVEL] [component] message key=value ...``."""
    timestamp = event_dict.get("timestamp", "")
    level = str(event_dict.get("level", "info")).upper()
    component = event_dict.get("component", DEFAULT_COMPONENT)
    line = f"[{timestamp}] [{level}] [{component}] {event_dict.get('event', '')}"

    extras = " ".join(f"{k}={v}" for k, v in event_dict.items() if k not in _LINE_KEYS)
    if extras:
        line = f"{line} {extras}"
    exception = event_dict.get("exception")
    if exception:
        line = f"{line}\n{exception}"
    return line


def render_echo_markup(
    _logger: Any, _method_name: str, event_dict: structlog.types.EventDict
) -> str:
    """Render the terminal echo as Rich markup: timestamp, styled level, message."""
    timestamp = event_dict.get("timestamp", "")
    level = str(event_dict.get("level", "info")).upper()
    tag = escape(f"[{level}]")
    style = style_for(level)
    if style:
        tag = f"[{style}]{tag}[/{style}]"
    return f"{escape(f'[{timestamp}]')} {tag} {escape(str(event_dict.get('event', '')))}"


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


class ConsoleEchoHandler(logging.Handler):
    """Echo log records to the terminal through the Renderer.

    ``verbose`` is switched on once the command line has been parsed.
    """

    def __init__(self, renderer: Renderer, *, verbose: bool = False) -> None:
        super().__init__(logging.DEBUG)
        self._renderer = renderer
        self.verbose = verbose

    def emit(self, record: logging.LogRecord) -> None:
        if record.levelno == logging.INFO and not self.verbose:
            return
        try:
            self._renderer.markup(self.format(record))
        except Exception:
            self.handleError(record)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def log_filename(prefix: str, now: datetime | None = None) -> str:
    """Per-run log file name with an embedded timestamp."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{stamp}.log"


def init_log_sink(
    config: LogConfig,
    renderer: Renderer,
    *,
    now: datetime | None = None,
) -> Path | None:
    """Create the run's log file and return its path.

    Returns None when neither the primary nor the fallback directory is
    usable; records then go to stdout.
    """
    filename = log_filename(config.file_prefix, now)
    candidates = [config.directory, config.fallback_directory or Path(tempfile.gettempdir())]

    for index, directory in enumerate(candidates):
        path = directory / filename
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except OSError:
            if index + 1 < len(candidates):
                renderer.render(
                    MessageClass.WARNING,
                    f"Cannot create log directory {directory}, using {candidates[index + 1]}",
                )
            continue
        return path

    renderer.render(MessageClass.ERROR, "Cannot create log file, logging to stdout only")
    return None


def configure_logging(
    *,
    sink: Path | None,
    renderer: Renderer,
    verbose: bool = False,
) -> ConsoleEchoHandler:
    """Configure structlog processors and output routing.

    Args:
        sink: Log file to append to; None writes records to stdout.
        renderer: Terminal renderer used by the echo handler.
        verbose: Echo INFO records as well.

    Returns:
        The echo handler, so the caller can turn verbose on later.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        add_default_component,
        structlog.processors.TimeStamper(fmt=TIMESTAMP_FORMAT, utc=False),
    ]

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    sink_handler: logging.Handler
    if sink is not None:
        sink_handler = logging.FileHandler(sink, encoding="utf-8")
    else:
        sink_handler = logging.StreamHandler(sys.stdout)
    sink_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                render_log_line,
            ],
        )
    )

    echo_handler = ConsoleEchoHandler(renderer, verbose=verbose)
    echo_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared_processors,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                render_echo_markup,
            ],
        )
    )

    shutdown_logging()
    mk_logger = logging.getLogger(LOGGER_NAME)
    mk_logger.addHandler(sink_handler)
    mk_logger.addHandler(echo_handler)
    mk_logger.setLevel(logging.DEBUG)
    mk_logger.propagate = False
    return echo_handler


def shutdown_logging() -> None:
    """Detach and close every handler on the mkacct logger."""
    mk_logger = logging.getLogger(LOGGER_NAME)
    for handler in mk_logger.handlers[:]:
        mk_logger.removeHandler(handler)
        handler.close()


def get_logger(component: str = DEFAULT_COMPONENT) -> Any:
    """Return a logger whose records carry *component*.

    The logger is a lazy proxy: it picks up the configuration in force at
    call time, so module-level loggers created before
    :func:`configure_logging` still reach the run's handlers.
    """
    return structlog.get_logger(LOGGER_NAME, component=component)
