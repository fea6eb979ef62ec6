from __future__ import annotations

import logging

from ..config import BootstrapConfig
from ..pipeline import RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)


class SshKeyStep:
    name = "ssh_key"
    title = "Generating SSH key"

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.path_exists(self.config.ssh_key_path)

    def primary(self, ctx: RunContext) -> None:
        key = self.config.ssh_key_path
        ctx.cmd(["mkdir", "-p", str(key.parent)])
        ctx.cmd(["chmod", "700", str(key.parent)])
        ctx.cmd(["ssh-keygen", "-t", "ed25519", "-f", str(key), "-N", "", "-q"])
        logger.info("  -> SSH key generated at %s", str(key))
