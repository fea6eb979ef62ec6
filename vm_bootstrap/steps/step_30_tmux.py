from __future__ import annotations

from ..config import BootstrapConfig
from ..lib.apt import apt_install
from ..pipeline import RunContext
from ..probe import SystemProbe


class TmuxStep:
    name = "tmux"
    title = "Installing tmux"

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.has_command("tmux")

    def primary(self, ctx: RunContext) -> None:
        apt_install(ctx, ["tmux"])
