from __future__ import annotations

from ..config import BootstrapConfig
from ..pipeline import RunContext
from ..probe import SystemProbe


class UvStep:
    name = "uv"
    title = "Installing Python uv"

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.has_command("uv") or probe.path_exists(self.config.home / ".local" / "bin" / "uv")

    def primary(self, ctx: RunContext) -> None:
        url = self.config.uv_install_url
        script = ctx.probe.fetch_script(url)
        ctx.cmd(["sh"], input_text=script)
