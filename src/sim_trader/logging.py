"""Logging for the simulator: Rich console, JSON run log, error log and a trade journal.

The trade journal (``trades.log``) receives only records from the order
ledger, one JSON object per fill or rejection, carrying the order fields
passed through ``extra`` (``order_id``, ``symbol``, ``side``, ``quantity``,
``fill_price``, ``reason``).
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger.json import JsonFormatter  # type: ignore[import-untyped]
from rich.console import Console
from rich.logging import RichHandler

from sim_trader.config import Settings

console = Console()

RUN_LOG = "sim_trader.log"
ERROR_LOG = "error.log"
TRADE_JOURNAL = "trades.log"
TRADE_JOURNAL_LOGGER = "sim_trader.trading.ledger"


def _reset_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def _rotating_handler(
    path: Path, settings: Settings, level: int | str, formatter: logging.Formatter
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(settings: Settings, *, cli_log_level: str | None = None) -> None:
    """Configure the console, the rotating JSON logs and the trade journal.

    Args:
        settings: Application settings (provides log_dir, levels, rotation config).
        cli_log_level: Optional CLI override for the console log level.
    """
    log_dir = settings.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    console_level = (cli_log_level or settings.log_level).upper()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Re-initialisation must not stack handlers or leak open files
    _reset_handlers(root)
    journal_logger = logging.getLogger(TRADE_JOURNAL_LOGGER)
    _reset_handlers(journal_logger)

    # ── Console ────────────────────────────────────────────────
    console_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
    )
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    # ── JSON run log and error log ────────────────────────────
    json_formatter = JsonFormatter(
        "%(asctime)s %(name)s %(levelname)s %(message)s %(funcName)s %(lineno)d",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    )

    root.addHandler(console_handler)
    root.addHandler(
        _rotating_handler(
            log_dir / RUN_LOG, settings, settings.log_file_level.upper(), json_formatter
        )
    )
    root.addHandler(_rotating_handler(log_dir / ERROR_LOG, settings, logging.ERROR, json_formatter))

    # ── Trade journal ─────────────────────────────────────────
    journal_formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(message)s",
        rename_fields={"asctime": "timestamp", "levelname": "level"},
    )
    journal_logger.addHandler(
        _rotating_handler(log_dir / TRADE_JOURNAL, settings, logging.INFO, journal_formatter)
    )

    logging.getLogger(__name__).debug(
        "Logging configured: console=%s, file=%s, dir=%s",
        console_level,
        settings.log_file_level.upper(),
        log_dir,
    )
