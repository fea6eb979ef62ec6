from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, Union

from ..config import BootstrapConfig
from ..errors import NetworkUnavailable
from ..lib.fetch import looks_like_config
from ..lib.files import backup_once_per_day, write_user_file
from ..pipeline import FailurePolicy, RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)


class BashrcStep:
    """Replace ~/.bashrc with the canonical copy.

    Best-effort: when the remote file is missing or not a plain rc file the
    local one is kept as is.
    """

    name = "bashrc"
    title = "Installing .bashrc"
    policy = FailurePolicy.TOLERATE

    def __init__(self, config: BootstrapConfig, today: Callable[[], dt.date] = dt.date.today) -> None:
        self.config = config
        self.today = today
        # Result of this run's single GET, shared by precondition and primary.
        self._fetched: Union[str, NetworkUnavailable, None] = None

    def _fetch(self, probe: SystemProbe) -> str:
        url = self.config.bashrc_url
        try:
            content = probe.fetch_text(url)
        except NetworkUnavailable as e:
            self._fetched = e
            raise
        if not looks_like_config(content):
            error = NetworkUnavailable(url, "empty response or HTML page instead of an rc file")
            self._fetched = error
            raise error
        self._fetched = content
        return content

    def precondition(self, probe: SystemProbe) -> bool:
        self._fetched = None
        return probe.file_text(self.config.bashrc_path) == self._fetch(probe)

    def primary(self, ctx: RunContext) -> None:
        fetched, self._fetched = self._fetched, None
        if isinstance(fetched, NetworkUnavailable):
            raise fetched
        content = fetched if fetched is not None else self._fetch(ctx.probe)
        path = self.config.bashrc_path
        backup_once_per_day(ctx, path, self.today())
        write_user_file(ctx, path, content)
        logger.info("  -> .bashrc installed from %s", self.config.bashrc_url)
