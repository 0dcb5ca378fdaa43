# src/bucket_audit_cli/utils/console.py
"""
Rich consoles and logging setup.

Reports go to stdout; progress bars, log records and errors go to stderr so that
`bucket-audit audit --format csv > out.csv` stays clean.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "bucket": "bold blue",
})

console = Console(theme=custom_theme)
err_console = Console(theme=custom_theme, stderr=True)

# botocore is very chatty at DEBUG
NOISY_LOGGERS = (
    "botocore",
    "boto3",
    "urllib3",
)


def configure_logging(level: str = "WARNING") -> logging.Logger:
    """
    Attach a RichHandler to the package logger. Safe to call more than once.
    """
    logger = logging.getLogger("bucket_audit_cli")
    logger.setLevel(level.upper())

    if not logger.handlers:
        handler = RichHandler(console=err_console, rich_tracebacks=True, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)
        logger.propagate = False

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger
