import datetime as _dt
import json
import logging as _logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional, TextIO

_ROOT = "flatbind"

_LINE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(_logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

_LEVEL_COLORS = {
    _logging.DEBUG: "36",
    _logging.INFO: "37",
    _logging.WARNING: "33",
    _logging.ERROR: "31",
    _logging.CRITICAL: "41",
}


def level_from_name(value: Optional[str | int], default: int) -> int:
    """Accept a level name in any case, a numeric string, or an int."""
    if value is None:
        return default
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name.isdigit():
        return int(name)
    level = _logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ValueError(f"Unknown log level: {name}")
    return level


@dataclass(frozen=True)
class LoggingSettings:
    """The ``[logging]`` config section with command line overrides applied."""
    console_level: int = _logging.INFO
    file_level: int = _logging.DEBUG
    color: bool = True
    log_dir: Optional[str] = None
    jsonl: bool = False
    filename_pattern: str = "flatbind-{timestamp}.log"
    timestamp_format: str = "%Y%m%dT%H%M%S"

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        *,
        console_level: Optional[str] = None,
        file_level: Optional[str] = None,
        log_dir: Optional[str] = None,
        disable_color: bool = False,
        jsonl: Optional[bool] = None,
    ) -> "LoggingSettings":
        section: Dict[str, Any] = (config or {}).get("logging", {})
        defaults = cls()
        # file logging is opt-in, the generator mostly runs inside build systems
        directory = log_dir or section.get("dir") or None
        return cls(
            console_level=level_from_name(
                console_level, level_from_name(section.get("console_level"), defaults.console_level)),
            file_level=level_from_name(
                file_level, level_from_name(section.get("file_level"), defaults.file_level)),
            color=bool(section.get("color", defaults.color)) and not disable_color,
            log_dir=os.path.abspath(directory) if directory else None,
            jsonl=bool(section.get("jsonl", defaults.jsonl) if jsonl is None else jsonl),
            filename_pattern=section.get("filename_pattern", defaults.filename_pattern),
            timestamp_format=section.get("timestamp_format", defaults.timestamp_format),
        )

    def log_path(self, directory: str, suffix: str) -> str:
        stamp = _dt.datetime.now().strftime(self.timestamp_format)
        name = self.filename_pattern.replace("{pid}", str(os.getpid())).format(timestamp=stamp)
        root, _ = os.path.splitext(name)
        return os.path.join(directory, root + suffix)


@dataclass
class LoggingState:
    log_dir: Optional[str]
    text_log_path: Optional[str]
    jsonl_log_path: Optional[str]
    console_level: int
    file_level: int
    jsonl_enabled: bool


_state: Optional[LoggingState] = None


class _ConsoleFormatter(_logging.Formatter):
    """Line formatter that colors the level name on a terminal."""

    def __init__(self, color: bool) -> None:
        super().__init__(_LINE_FORMAT, _TIME_FORMAT)
        self.color = color

    def format(self, record: _logging.LogRecord) -> str:
        if getattr(record, "plain", False):
            return record.getMessage()
        code = _LEVEL_COLORS.get(record.levelno) if self.color else None
        if code is None:
            return super().format(record)
        levelname = record.levelname
        record.levelname = f"\033[{code}m{levelname}\033[0m"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


class _JsonLinesFormatter(_logging.Formatter):
    """One JSON object per record; ``extra`` keys such as ``record`` are kept."""

    def format(self, record: _logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, _TIME_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.lineno}",
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            try:
                json.dumps(value)
            except TypeError:
                value = repr(value)
            entry[key] = value
        return json.dumps(entry, ensure_ascii=False)


def _stream_handler(stream: TextIO, level: int, color: bool) -> _logging.Handler:
    handler = _logging.StreamHandler(stream=stream)
    handler.setLevel(level)
    handler.setFormatter(_ConsoleFormatter(color and stream.isatty()))
    return handler


def _console_handlers(settings: LoggingSettings) -> list[_logging.Handler]:
    # progress goes to stdout, errors to stderr so build tools surface them
    progress = _stream_handler(sys.stdout, settings.console_level, settings.color)
    progress.addFilter(lambda record: record.levelno < _logging.ERROR)
    errors = _stream_handler(sys.stderr, max(settings.console_level, _logging.ERROR), settings.color)
    return [progress, errors]


def _file_handler(path: str, level: int, formatter: _logging.Formatter) -> _logging.Handler:
    handler = _logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def get_logger(name: Optional[str] = None) -> _logging.Logger:
    """Loggers all live under the ``flatbind`` namespace."""
    if not name:
        return _logging.getLogger(_ROOT)
    if name != _ROOT and not name.startswith(f"{_ROOT}."):
        name = f"{_ROOT}.{name}"
    return _logging.getLogger(name)


def configure_logging(
    config: Dict[str, Any],
    *,
    console_level_override: Optional[str] = None,
    file_level_override: Optional[str] = None,
    log_dir_override: Optional[str] = None,
    disable_color: bool = False,
    enable_jsonl_override: Optional[bool] = None,
    force_reconfigure: bool = False,
) -> LoggingState:
    global _state

    settings = LoggingSettings.from_config(
        config,
        console_level=console_level_override,
        file_level=file_level_override,
        log_dir=log_dir_override,
        disable_color=disable_color,
        jsonl=enable_jsonl_override,
    )

    root = get_logger()
    if _state is not None and root.handlers and not force_reconfigure:
        return _state

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = False

    handlers = _console_handlers(settings)
    text_log_path = None
    jsonl_log_path = None
    log_dir = settings.log_dir
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        text_log_path = settings.log_path(log_dir, ".log")
        handlers.append(_file_handler(
            text_log_path, settings.file_level, _logging.Formatter(_LINE_FORMAT, _TIME_FORMAT)))
        if settings.jsonl:
            jsonl_log_path = settings.log_path(log_dir, ".jsonl")
            handlers.append(_file_handler(jsonl_log_path, settings.file_level, _JsonLinesFormatter()))

    root.setLevel(min(handler.level for handler in handlers))
    for handler in handlers:
        root.addHandler(handler)

    _state = LoggingState(
        log_dir=settings.log_dir,
        text_log_path=text_log_path,
        jsonl_log_path=jsonl_log_path,
        console_level=settings.console_level,
        file_level=settings.file_level,
        jsonl_enabled=settings.jsonl and settings.log_dir is not None,
    )
    return _state


def get_logging_state() -> Optional[LoggingState]:
    return _state


def is_configured() -> bool:
    return bool(get_logger().handlers)
