from __future__ import annotations

import logging
import time

from ..config import BootstrapConfig
from ..lib.apt import apt_update, apt_upgrade
from ..pipeline import RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)


class SystemPackagesStep:
    name = "system_packages"
    title = "Updating system packages"

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        # apt touches the lists directory on every successful update.
        mtime = probe.path_mtime(self.config.apt_lists_dir)
        if mtime is None:
            return False
        age_hours = (time.time() - mtime) / 3600.0
        return age_hours < self.config.apt_max_age_hours

    def primary(self, ctx: RunContext) -> None:
        apt_update(ctx)
        apt_upgrade(ctx)
        # Partial updates do not always touch the directory itself.
        ctx.cmd(ctx.as_root(["touch", str(self.config.apt_lists_dir)]))
