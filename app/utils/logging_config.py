"""
Logging setup for the Job Match API

Handlers are chosen from ENVIRONMENT:
    development  DEBUG to console and rotating files
    production   LOG_LEVEL to console and rotating files
    testing      WARNING to console only
"""
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List

DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(funcName)-20s:%(lineno)-4d | %(message)s"
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

_ROTATING_FILE = {
    "class": "logging.handlers.RotatingFileHandler",
    "formatter": "detailed",
    "maxBytes": 10485760,  # 10MB
    "backupCount": 5,
    "encoding": "utf8",
}


def _file_handlers(level: str) -> Dict[str, Dict[str, Any]]:
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(exist_ok=True)
    stamp = datetime.now().strftime('%Y%m%d')
    return {
        "file": {**_ROTATING_FILE, "level": level, "filename": str(log_dir / f"job_match_{stamp}.log")},
        "error_file": {**_ROTATING_FILE, "level": "ERROR", "filename": str(log_dir / f"job_match_errors_{stamp}.log")},
    }


def setup_logging(level: str = "INFO", log_to_files: bool = True, simple: bool = False) -> None:
    """
    Configure the root and uvicorn loggers through dictConfig

    Args:
        level: threshold for the console and main file handler
        log_to_files: add the rotating main and error files under LOG_DIR
        simple: short console lines, used when running the tests
    """
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "simple" if simple else "detailed",
            "stream": "ext://sys.stdout",
        }
    }
    if log_to_files:
        handlers.update(_file_handlers(level))

    root_handlers: List[str] = list(handlers)
    uvicorn_handlers = [name for name in root_handlers if name != "error_file"]

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {"format": DETAILED_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "simple": {"format": SIMPLE_FORMAT},
        },
        "handlers": handlers,
        "loggers": {
            "": {"level": level, "handlers": root_handlers, "propagate": False},
            "uvicorn": {"level": "INFO", "handlers": uvicorn_handlers, "propagate": False},
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
    })

    get_logger("logging").info(f"Logging configured - Level: {level}, handlers: {', '.join(root_handlers)}")


def get_logger(name: str) -> logging.Logger:
    """Loggers live under the job_match namespace"""
    return logging.getLogger(f"job_match.{name}")


def configure_for_environment():
    environment = os.getenv("ENVIRONMENT", "development").lower()
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    if environment == "testing":
        setup_logging(level="WARNING", log_to_files=False, simple=True)
    elif environment == "development":
        setup_logging(level="DEBUG")
    else:
        setup_logging(level=log_level)


class PerformanceMonitor:
    """Times a block and logs it, warning above threshold_ms"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.start_time = None

    def __enter__(self):
        self.start_time = time.time()
        return self

    @property
    def elapsed_ms(self) -> float:
        return (time.time() - self.start_time) * 1000

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = self.elapsed_ms

        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {elapsed:.2f}ms: {exc_val}")
        elif elapsed > self.threshold_ms:
            self.logger.warning(f"{self.operation_name} took {elapsed:.2f}ms (threshold {self.threshold_ms}ms)")
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed:.2f}ms")
