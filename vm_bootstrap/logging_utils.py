from __future__ import annotations

import logging
import sys
from pathlib import Path

DEFAULT_LOG_PATH = "~/.local/state/vm-bootstrap/vm-bootstrap.log"

_FILE_HANDLER = "vm-bootstrap-file"
_CONSOLE_HANDLER = "vm-bootstrap-console"


def _open_log(path: Path) -> logging.FileHandler:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(path)
    except OSError:
        return logging.FileHandler(Path.cwd() / "vm-bootstrap.log")


def configure_logging(log_path: str = DEFAULT_LOG_PATH, level: int = logging.INFO) -> str:
    """Attach the run log (DEBUG, timestamped) and the stdout step log.

    Safe to call again: the handlers are named and added once. Returns the
    path of the log file actually opened, which is ./vm-bootstrap.log when
    `log_path` is not writable.
    """

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    existing = {h.get_name(): h for h in root.handlers}
    if _FILE_HANDLER in existing:
        return existing[_FILE_HANDLER].baseFilename

    file_handler = _open_log(Path(log_path).expanduser())
    file_handler.set_name(_FILE_HANDLER)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    ))
    root.addHandler(file_handler)

    if _CONSOLE_HANDLER not in existing:
        console = logging.StreamHandler(sys.stdout)
        console.set_name(_CONSOLE_HANDLER)
        console.setLevel(level)
        console.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(console)

    logging.getLogger(__name__).debug("Writing run log to %s", file_handler.baseFilename)
    return file_handler.baseFilename
