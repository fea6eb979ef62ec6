from __future__ import annotations

import logging

from ..config import BootstrapConfig
from ..lib.apt import apt_remove_best_effort
from ..lib.nvm import open_permissions
from ..pipeline import RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)


class NvmStep:
    """System-wide nvm under config.nvm_dir (installed before Node-based tools)."""

    name = "nvm"
    title = "Installing nvm"

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.file_nonempty(self.config.nvm_dir / "nvm.sh")

    def primary(self, ctx: RunContext) -> None:
        cfg = self.config

        # A distro nodejs shadows the nvm-managed one.
        if ctx.probe.package_installed("nodejs"):
            logger.info("  -> Removing system Node.js to avoid conflicts with nvm...")
            apt_remove_best_effort(ctx, ["nodejs", "npm"])

        tag = ctx.probe.latest_release_tag(cfg.nvm_release_api)
        url = cfg.nvm_install_url(tag)
        script = ctx.probe.fetch_script(url)

        logger.info("  -> Installing nvm %s...", tag)
        ctx.cmd(ctx.as_root(["mkdir", "-p", str(cfg.nvm_dir)]))
        ctx.cmd(ctx.as_root(["env", f"NVM_DIR={cfg.nvm_dir}", "bash"]), input_text=script)
        open_permissions(ctx)
