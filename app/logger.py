import logging
import sys
from datetime import datetime
from typing import Final

from resources import log_path
from rich.console import Console
from rich.logging import RichHandler

console: Final[Console] = Console()

# --debug: DEBUG level, locals in tracebacks and the per-instruction tracer
debug_mode: Final[bool] = "--debug" in sys.argv

level: Final[int] = logging.DEBUG if debug_mode else logging.INFO
time_format: Final[str] = "%Y-%m-%d %H:%M:%S"
file_format: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def log_file_name() -> str:
    return f"pychip8_{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}.log"


def _file_handler() -> logging.Handler:
    log_path.mkdir(exist_ok=True)
    handler = logging.FileHandler(log_path / log_file_name(), encoding="utf-8", delay=True)
    handler.setFormatter(logging.Formatter(file_format, datefmt=time_format))
    return handler


logging.basicConfig(
    level=level,
    format="%(message)s",
    datefmt=time_format,
    handlers=[
        RichHandler(
            rich_tracebacks=True,
            show_path=debug_mode,
            tracebacks_show_locals=debug_mode,
            console=console,
        ),
        _file_handler(),
    ],
)
log: Final[logging.Logger] = logging.getLogger("PyCHIP8")
