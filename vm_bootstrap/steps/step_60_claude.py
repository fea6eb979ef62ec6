from __future__ import annotations

import logging
import shlex

from ..config import BootstrapConfig
from ..lib.nvm import NODE_BIN_GLOB, nvm_shell_argv, open_permissions
from ..pipeline import RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)


class ClaudeStep:
    """Claude Code CLI.

    The native installer is tried first. In regions where it is blocked the
    endpoint answers with an HTML page rather than a script; that content is
    never executed and the npm package (through nvm's Node) is used instead.
    """

    name = "claude"
    title = "Installing Claude Code"
    requires = ("node",)

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return (
            probe.has_command("claude")
            or probe.path_exists(self.config.home / ".local" / "bin" / "claude")
            or probe.glob_exists(self.config.nvm_dir, NODE_BIN_GLOB.format(name="claude"))
        )

    def primary(self, ctx: RunContext) -> None:
        url = self.config.claude_install_url
        script = ctx.probe.fetch_script(url)
        ctx.cmd(["bash"], input_text=script)

    def fallback(self, ctx: RunContext) -> None:
        package = shlex.quote(self.config.claude_npm_package)
        ctx.cmd(nvm_shell_argv(ctx, f"npm install -g {package}"))
        open_permissions(ctx)
