"""
Logging for the Repair Recorder
Rotating main and error logs plus console output, flushed on every record
so Cloud Run / docker logs show saves as they happen
"""
import logging
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

MAIN_LOG_FILE = 'repair_recorder.log'
ERROR_LOG_FILE = 'errors.log'
ERROR_LOG_MAX_MB = 5
ERROR_LOG_BACKUPS = 3


def _rotating_handler(path, level, max_mb, backups, formatter):
    handler = RotatingFileHandler(
        path,
        maxBytes=max_mb * 1024 * 1024,
        backupCount=backups,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


class RepairLogger:
    """Component-tagged logger used by the API, the orchestrator and the Google adapters"""

    def __init__(self, name="Repair-Recorder", log_dir="logs", log_level="INFO",
                 max_mb=10, backup_count=5):
        """
        Args:
            name: Underlying logging.Logger name
            log_dir: Directory for repair_recorder.log and errors.log
            log_level: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            max_mb: Size of repair_recorder.log before it rotates
            backup_count: Rotated copies of repair_recorder.log to keep
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))
        self.logger.propagate = False
        self.logger.handlers.clear()

        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        self.log_path = log_path

        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.logger.addHandler(
            _rotating_handler(log_path / MAIN_LOG_FILE, logging.DEBUG, max_mb, backup_count, formatter)
        )
        self.logger.addHandler(
            _rotating_handler(log_path / ERROR_LOG_FILE, logging.ERROR, ERROR_LOG_MAX_MB, ERROR_LOG_BACKUPS, formatter)
        )

        console = logging.StreamHandler()
        console.setLevel(logging.INFO)
        console.setFormatter(formatter)
        self.logger.addHandler(console)

    def debug(self, message, component=""):
        self._log(logging.DEBUG, message, component)

    def info(self, message, component=""):
        self._log(logging.INFO, message, component)

    def warning(self, message, component=""):
        self._log(logging.WARNING, message, component)

    def error(self, message, component="", exc_info=False):
        self._log(logging.ERROR, message, component, exc_info=exc_info)

    def critical(self, message, component="", exc_info=False):
        self._log(logging.CRITICAL, message, component, exc_info=exc_info)

    def _log(self, level, message, component="", exc_info=False):
        if component:
            message = f"[{component}] {message}"
        self.logger.log(level, message, exc_info=exc_info)
        for handler in self.logger.handlers:
            handler.flush()

    # Save pipeline events

    def log_save_start(self, substation, doc_number, has_file):
        attachment = "with" if has_file else "without"
        self.info(
            f"Saving report '{doc_number or '-'}' for '{substation or '-'}' ({attachment} attachment)",
            component="SaveOrchestrator"
        )

    def log_upload(self, file_name, folder_id, link):
        self.info(f"Uploaded '{file_name}' to folder {folder_id}: {link}", component="Drive")

    def log_sheets_append(self, target_range, column_count):
        self.info(f"Appended {column_count}-column row to {target_range}", component="Sheets")


_global_logger = None


def get_logger(log_level="INFO", log_dir="logs", **kwargs):
    """Return the process-wide RepairLogger, creating it on first use"""
    global _global_logger
    if _global_logger is None:
        _global_logger = RepairLogger(log_level=log_level, log_dir=log_dir, **kwargs)
    return _global_logger
