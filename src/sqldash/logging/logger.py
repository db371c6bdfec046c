import logging
import os
import glob
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

_INITIALIZED = False

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class TimestampRotatingFileHandler(RotatingFileHandler):
    """Size-triggered rotation that renames the full file with a timestamp.

    logs/app.log becomes logs/app_20260124_153012.log and a fresh
    logs/app.log is opened. backupCount=0 keeps every rotated file;
    backupCount=N keeps the newest N.
    """

    def rotated_name(self) -> str:
        base = Path(self.baseFilename)
        suffix = base.suffix or ".log"
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        candidate = base.with_name(f"{base.stem}_{ts}{suffix}")
        n = 1
        while candidate.exists():
            candidate = base.with_name(f"{base.stem}_{ts}_{n}{suffix}")
            n += 1
        return str(candidate)

    def prune(self) -> None:
        if not self.backupCount or self.backupCount <= 0:
            return
        base = Path(self.baseFilename)
        pattern = str(base.with_name(f"{base.stem}_*{base.suffix or '.log'}"))
        rotated = sorted(glob.glob(pattern), key=os.path.getmtime, reverse=True)
        for stale in rotated[self.backupCount:]:
            try:
                os.remove(stale)
            except OSError:
                pass

    def doRollover(self) -> None:
        if self.stream:
            try:
                self.stream.close()
            finally:
                self.stream = None

        if os.path.exists(self.baseFilename):
            try:
                os.replace(self.baseFilename, self.rotated_name())
            except OSError:
                # Keep logging into the current file if the rename is refused
                pass

        self.prune()

        if not self.delay:
            self.stream = self._open()


def init_logging(
    log_level: str = "INFO",
    log_file: str = "logs/app.log",
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 0,
) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)
    level = getattr(logging, (log_level or "INFO").upper(), logging.INFO)

    file_handler = TimestampRotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    stream_handler = logging.StreamHandler()

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[file_handler, stream_handler])
    _INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"sqldash.{name}")
