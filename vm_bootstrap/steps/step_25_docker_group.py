from __future__ import annotations

import logging

from ..config import BootstrapConfig
from ..pipeline import RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)


class DockerGroupStep:
    name = "docker_group"
    title = "Adding user to the docker group"
    requires = ("docker",)

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.user_in_group(self.config.user, "docker")

    def primary(self, ctx: RunContext) -> None:
        # -f: succeed if the group already exists.
        ctx.cmd(ctx.as_root(["groupadd", "-f", "docker"]))
        ctx.cmd(ctx.as_root(["usermod", "-aG", "docker", self.config.user]))
        logger.info("  -> Added '%s' to docker group.", self.config.user)
