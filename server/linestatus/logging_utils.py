import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import Settings


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _resolve_path(path: str) -> Path:
    path_obj = Path(path)
    if not path_obj.is_absolute():
        path_obj = Path.cwd() / path_obj
    return path_obj


def _build_formatter(settings: Settings) -> logging.Formatter:
    if settings.up_stage:
        return JsonFormatter()
    return logging.Formatter(
        fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def configure_logging(settings: Settings) -> logging.Logger:
    """
    Configure the shared application logger: stdout always, plus a rotating file when one is set.
    Text lines locally, JSON lines once deployed to a stage. Subsequent calls are no-ops.
    """
    logger = logging.getLogger("linestatus")
    if logger.handlers:
        return logger

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logger.setLevel(level)
    formatter = _build_formatter(settings)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if settings.log_file:
        log_path = _resolve_path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    logger.info(
        "Logging initialized (level=%s format=%s file=%s)",
        logging.getLevelName(level),
        "json" if settings.up_stage else "text",
        settings.log_file or "-",
    )
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"linestatus.{name}")
