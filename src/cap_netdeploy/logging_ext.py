"""!
@brief Structured logging helpers for cap-netdeploy.
@details Two loggers are configured: a human-readable text stream that is also
echoed to the console, and a JSONL telemetry stream for fleet-side collection.
Both rotate daily. Startup metadata from :mod:`cap_netdeploy.version` is
recorded so log bundles from many machines can be correlated.
"""
from __future__ import annotations

import datetime as _dt
import json
import logging
import os
import sys
import uuid
from logging import handlers
from pathlib import Path
from typing import Dict, Iterable, Mapping, Tuple

from . import constants, version

HUMAN_LOGGER_NAME = "cap_netdeploy.human"
"""!
@brief Logger name for human-readable output.
"""

MACHINE_LOGGER_NAME = "cap_netdeploy.machine"
"""!
@brief Logger name for JSONL telemetry output.
"""

HUMAN_LOG_FILENAME = "human.log"
MACHINE_LOG_FILENAME = "events.jsonl"
LOG_BACKUP_COUNT = 14

_STANDARD_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
        "asctime",
        "channel",
    }
)

_CURRENT_LOG_DIRECTORY: Path | None = None
_RUN_METADATA: Dict[str, object] | None = None


class _ChannelFilter(logging.Filter):
    """!
    @brief Inject a fixed ``channel`` attribute on log records.
    """

    def __init__(self, channel: str) -> None:
        super().__init__()
        self._channel = channel

    def filter(self, record: logging.LogRecord) -> bool:
        record.channel = self._channel
        return True


class _JsonLineFormatter(logging.Formatter):
    """!
    @brief Format ``LogRecord`` instances as single-line JSON objects.
    @details Standard metadata is merged with any custom ``extra`` attributes.
    Values that are not JSON serializable are coerced to their ``repr``.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - concise override
        moment = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
        payload: Dict[str, object] = {
            "timestamp": moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "channel": getattr(record, "channel", "machine"),
        }
        payload.update(_extract_extras(record))
        try:
            return json.dumps(payload, ensure_ascii=False)
        except TypeError:
            sanitized = {key: _coerce_json(value) for key, value in payload.items()}
            return json.dumps(sanitized, ensure_ascii=False)


def _extract_extras(record: logging.LogRecord) -> Dict[str, object]:
    return {
        key: value for key, value in record.__dict__.items() if key not in _STANDARD_RECORD_KEYS
    }


def _coerce_json(value: object) -> object:
    try:
        json.dumps(value)
    except TypeError:
        return repr(value)
    return value


def _configure_logger(
    logger: logging.Logger, formatter: logging.Formatter, handlers_to_add: Iterable[logging.Handler]
) -> None:
    """!
    @brief Reset a logger and attach the supplied handlers.
    """

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for flt in list(logger.filters):
        logger.removeFilter(flt)
    for handler in handlers_to_add:
        if handler.formatter is None:
            handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.propagate = False


def default_log_directory() -> Path:
    """!
    @brief ``%ProgramData%\\cap-netdeploy\\logs``, or a home-directory fallback.
    """

    program_data = os.environ.get("ProgramData")
    if program_data:
        return Path(program_data) / constants.LOG_DIRECTORY_NAME / "logs"
    return Path.home() / f".{constants.LOG_DIRECTORY_NAME}" / "logs"


def _rotating_handler(path: Path) -> logging.Handler:
    return handlers.TimedRotatingFileHandler(
        path,
        when="midnight",
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


def setup_logging(
    root_dir: Path | None,
    *,
    console: bool = True,
    json_to_stdout: bool = False,
    level: int = logging.INFO,
) -> Tuple[logging.Logger, logging.Logger]:
    """!
    @brief Set up human and machine loggers.
    @details When ``root_dir`` cannot be created the file handlers are skipped
    and only the console streams remain, so an unwritable log share never
    blocks remediation.
    @param root_dir Directory for ``human.log`` and ``events.jsonl``; ``None``
    disables file output.
    @param console Echo human messages to stdout.
    @param json_to_stdout Mirror machine events to stdout.
    @returns Pair of human and machine loggers.
    """

    global _CURRENT_LOG_DIRECTORY

    human_handlers: list[logging.Handler] = []
    machine_handlers: list[logging.Handler] = []
    _CURRENT_LOG_DIRECTORY = None
    file_error: OSError | None = None

    if root_dir is not None:
        try:
            root_dir.mkdir(parents=True, exist_ok=True)
            human_handlers.append(_rotating_handler(root_dir / HUMAN_LOG_FILENAME))
            machine_handlers.append(_rotating_handler(root_dir / MACHINE_LOG_FILENAME))
            _CURRENT_LOG_DIRECTORY = root_dir
        except OSError as exc:
            file_error = exc
            for handler in human_handlers + machine_handlers:
                handler.close()
            human_handlers.clear()
            machine_handlers.clear()

    if console:
        console_handler = logging.StreamHandler(stream=sys.stdout)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        human_handlers.append(console_handler)
    if json_to_stdout:
        machine_handlers.append(logging.StreamHandler(stream=sys.stdout))

    human_logger = logging.getLogger(HUMAN_LOGGER_NAME)
    machine_logger = logging.getLogger(MACHINE_LOGGER_NAME)
    human_logger.setLevel(level)
    machine_logger.setLevel(level)

    human_formatter = logging.Formatter(
        "%(asctime)s %(levelname)-8s [%(channel)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    _configure_logger(human_logger, human_formatter, human_handlers)
    _configure_logger(machine_logger, _JsonLineFormatter(), machine_handlers)

    human_logger.addFilter(_ChannelFilter("human"))
    machine_logger.addFilter(_ChannelFilter("machine"))

    _emit_run_metadata(human_logger, machine_logger)
    if file_error is not None:
        human_logger.warning("File logging disabled; cannot use %s: %s", root_dir, file_error)

    return human_logger, machine_logger


def get_human_logger() -> logging.Logger:
    """!
    @brief Retrieve the configured human-readable logger.
    """

    return logging.getLogger(HUMAN_LOGGER_NAME)


def get_machine_logger() -> logging.Logger:
    """!
    @brief Retrieve the configured machine/JSON logger.
    """

    return logging.getLogger(MACHINE_LOGGER_NAME)


def get_log_directory() -> Path | None:
    return _CURRENT_LOG_DIRECTORY


def get_run_metadata() -> Mapping[str, object] | None:
    """!
    @brief Return the most recent run metadata payload.
    @details Contains ``run_id``, an ISO-8601 UTC ``timestamp``, version and
    build identifiers, the Python version and the log directory.
    """

    return dict(_RUN_METADATA) if _RUN_METADATA is not None else None


def build_event_extra(event: str, **fields: object) -> Dict[str, object]:
    """!
    @brief Build an ``extra`` mapping for a machine log call.
    @details The current run identifier is attached so every event can be
    joined back to its ``run_start`` record.
    """

    payload: Dict[str, object] = {"event": event}
    if _RUN_METADATA is not None:
        payload["run_id"] = _RUN_METADATA["run_id"]
    payload.update(fields)
    return payload


def _emit_run_metadata(human_logger: logging.Logger, machine_logger: logging.Logger) -> None:
    global _RUN_METADATA

    moment = _dt.datetime.now(tz=_dt.timezone.utc)
    _RUN_METADATA = {
        "run_id": uuid.uuid4().hex,
        "timestamp": moment.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "version": version.__version__,
        "build": version.__build__,
        "python": sys.version.split()[0],
        "logdir": str(_CURRENT_LOG_DIRECTORY) if _CURRENT_LOG_DIRECTORY else None,
    }

    human_logger.debug(
        "cap-netdeploy %s (%s) starting, run %s",
        version.__version__,
        version.__build__,
        _RUN_METADATA["run_id"],
    )
    machine_logger.info("run_start", extra={"event": "run_start", "run": dict(_RUN_METADATA)})


__all__ = [
    "HUMAN_LOGGER_NAME",
    "MACHINE_LOGGER_NAME",
    "build_event_extra",
    "default_log_directory",
    "get_human_logger",
    "get_log_directory",
    "get_machine_logger",
    "get_run_metadata",
    "setup_logging",
]
