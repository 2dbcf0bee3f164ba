import logging
import sys

from tqdm import tqdm

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s %(funcName)s():%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class _ColoredFormatter(logging.Formatter):
    _COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    _RESET = '\033[0m'
    _BOLD = '\033[1m'

    def format(self, record: logging.LogRecord) -> str:
        color = self._COLORS.get(record.levelname, '')
        if not color:
            return super().format(record)
        # copy, other handlers must see the plain level name
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{self._BOLD}{record.levelname}{self._RESET}"
        return super().format(colored)


class _TqdmHandler(logging.StreamHandler):
    """Writes above the date progress bar instead of through it."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
        except Exception:  # noqa: BLE001
            self.handleError(record)


def setup_logging(level: int | str = logging.INFO) -> None:
    """Console logging with colors on a TTY, function names and line numbers."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = _TqdmHandler(sys.stdout)
    handler.setLevel(level)
    formatter_class = _ColoredFormatter if sys.stdout.isatty() else logging.Formatter
    handler.setFormatter(formatter_class(LOG_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(handler)

    # Playwright runs its driver on an asyncio loop, both are chatty at DEBUG
    logging.getLogger('asyncio').setLevel(logging.WARNING)
    logging.getLogger('playwright').setLevel(logging.WARNING)
