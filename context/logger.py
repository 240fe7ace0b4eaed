# ─── Hierarchical Call Stack Tracking ─────────────────────────────────────────
import contextvars
import logging
import sys
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

from loguru import logger as _loguru

# A context variable holding the current call-stack as a list of function names
_call_stack = contextvars.ContextVar("_call_stack", default=[])


@contextmanager
def log_func(name: str):
    """
    Context manager to push/pop a function name onto the call stack.
    """
    stack = _call_stack.get()
    token = _call_stack.set(stack + [name])
    try:
        yield
    finally:
        _call_stack.reset(token)


def _enrich_record(record):
    """
    Loguru patch function: injects extra['func'] = dot-joined call stack.
    """
    stack = _call_stack.get()
    record["extra"]["func"] = ".".join(stack) if stack else ""
    return record


class InterceptHandler(logging.Handler):
    """
    Re-emits stdlib logging records through loguru so library modules can keep
    using logging.getLogger(__name__).
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _loguru.level(record.levelname).name
        except ValueError:
            level = record.levelno
        # Walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        log = Logger._logger or _loguru
        log.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# ─── Logger Utility ───────────────────────────────────────────────────────────

class Logger:
    """
    Logger utility using loguru with UUID-tagged session identity.
    Adds a patch to include hierarchical func names in every record.
    """

    _configured = False
    _uuid = None
    _logger = None
    _log_path = None
    _handler_ids = SimpleNamespace(file=None, console=None)

    FORMAT = (
        "<green>{time:HH:mm:ss.SSS}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{extra[func]}</cyan> | "
        "{message}"
    )

    @staticmethod
    def init_logger(
            log_dir: Path = Path("logs"),
            label: str = None,
            serialize: bool = False,
            pretty_console: bool = True,
            level: str = "INFO",
            to_file: bool = True,
    ):
        """
        Initialize the loguru logger with optional file and console output and
        route stdlib logging into it.
        """
        if Logger._configured:
            return Logger._logger

        Logger._uuid = str(uuid.uuid4())
        Logger._configured = True

        logger = _loguru
        logger.remove()
        logger = logger.patch(_enrich_record)

        if pretty_console:
            Logger._handler_ids.console = logger.add(
                sys.stderr, level=level, colorize=True, format=Logger.FORMAT
            )

        if to_file:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S")
            suffix = f"__{label}" if label else f"__{Logger._uuid}"
            log_file = log_dir / f"{timestamp}{suffix}.log"
            Logger._log_path = log_file
            Logger._handler_ids.file = logger.add(
                str(log_file), level=level, serialize=serialize, enqueue=True, format=Logger.FORMAT
            )

        Logger._logger = logger
        Logger.intercept_stdlib(level)
        logger.debug("[Logger Init] UUID={} → {}", Logger._uuid, Logger._log_path)
        return logger

    @staticmethod
    def intercept_stdlib(level: str = "INFO") -> None:
        logging.root.handlers = [InterceptHandler()]
        logging.root.setLevel(level)

    @staticmethod
    def get_loguru():
        if not Logger._configured:
            raise RuntimeError("Logger has not been initialized.")
        return Logger._logger

    @staticmethod
    def diagnostics() -> dict:
        return {
            "uuid": Logger._uuid,
            "configured": Logger._configured,
            "log_path": str(Logger._log_path) if Logger._log_path else None,
            "handlers": vars(Logger._handler_ids).copy(),
        }

    @staticmethod
    def reset():
        if Logger._logger:
            Logger._logger.remove()
        logging.root.handlers = [h for h in logging.root.handlers if not isinstance(h, InterceptHandler)]
        Logger._configured = False
        Logger._uuid = None
        Logger._logger = None
        Logger._log_path = None
        Logger._handler_ids = SimpleNamespace(file=None, console=None)
