from __future__ import annotations

import logging

from ..config import BootstrapConfig
from ..errors import SubprocessFailed
from ..lib.files import write_root_file
from ..pipeline import RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)


def keepalive_block(interval: int, count_max: int) -> str:
    return (
        "\n"
        "# Prevent SSH session timeout\n"
        f"ClientAliveInterval {interval}\n"
        f"ClientAliveCountMax {count_max}\n"
        "TCPKeepAlive yes\n"
    )


class SshKeepaliveStep:
    name = "ssh_keepalive"
    title = "Configuring SSH keepalive"

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.file_has_line(self.config.sshd_config, r"^ClientAliveInterval")

    def primary(self, ctx: RunContext) -> None:
        cfg = self.config
        block = keepalive_block(cfg.ssh_client_alive_interval, cfg.ssh_client_alive_count_max)
        write_root_file(ctx, cfg.sshd_config, block, append=True)
        self._restart_daemon(ctx)
        logger.info(
            "  -> SSH keepalive configured (%ss interval, %s max count).",
            cfg.ssh_client_alive_interval,
            cfg.ssh_client_alive_count_max,
        )

    def _restart_daemon(self, ctx: RunContext) -> None:
        # Unit name differs between releases.
        for unit in ("sshd", "ssh"):
            try:
                ctx.cmd(ctx.as_root(["systemctl", "restart", unit]))
                return
            except SubprocessFailed:
                continue
        logger.info("Non-fatal: could not restart the SSH daemon; settings apply on next restart")
