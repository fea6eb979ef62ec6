from __future__ import annotations

from ..config import BootstrapConfig
from ..lib.nvm import NODE_BIN_GLOB, nvm_shell_argv, open_permissions
from ..pipeline import RunContext
from ..probe import SystemProbe


class NodeStep:
    name = "node"
    title = "Installing Node.js LTS"
    requires = ("nvm",)

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.has_command("node") or probe.glob_exists(
            self.config.nvm_dir, NODE_BIN_GLOB.format(name="node")
        )

    def primary(self, ctx: RunContext) -> None:
        ctx.cmd(nvm_shell_argv(ctx, "nvm install --lts"))
        open_permissions(ctx)
