from __future__ import annotations

import datetime as dt
import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..errors import FileWriteFailed

if TYPE_CHECKING:
    from ..pipeline import RunContext

logger = logging.getLogger(__name__)


def write_root_file(ctx: "RunContext", path: Path, contents: str, *, append: bool = False) -> None:
    """Write a root-owned file through `tee` so sudo applies to the write."""

    argv = ctx.as_root(["tee", "-a", str(path)] if append else ["tee", str(path)])
    if ctx.dry_run:
        logger.info("Would %s %s", "append to" if append else "write", str(path))
        return
    ctx.cmd(argv, input_text=contents)


def write_user_file(ctx: "RunContext", path: Path, contents: str) -> None:
    if ctx.dry_run:
        logger.info("Would write %s", str(path))
        return
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="": keep the line endings exactly as fetched.
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(contents)
    except OSError as e:
        raise FileWriteFailed(str(path), e) from e


def daily_backup_path(path: Path, today: Optional[dt.date] = None) -> Path:
    day = today or dt.date.today()
    return path.with_name(f"{path.name}.bak.{day:%Y%m%d}")


def backup_once_per_day(ctx: "RunContext", path: Path, today: Optional[dt.date] = None) -> Optional[Path]:
    """Copy path to path.bak.YYYYMMDD unless today's backup already exists.

    Returns the backup written, or None.
    """

    backup = daily_backup_path(path, today)
    if not path.exists() or backup.exists():
        return None
    if ctx.dry_run:
        logger.info("Would back up %s to %s", str(path), str(backup))
        return None
    try:
        shutil.copy2(path, backup)
    except OSError as e:
        raise FileWriteFailed(str(backup), e) from e
    logger.info("  -> Backed up existing %s to %s", path.name, str(backup))
    return backup
