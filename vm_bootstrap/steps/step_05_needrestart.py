from __future__ import annotations

import logging

from ..config import BootstrapConfig
from ..pipeline import FailurePolicy, RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)

SED_EXPR = r"s/#\$nrconf{restart} = 'i';/\$nrconf{restart} = 'a';/"
INTERACTIVE_PATTERN = r"^#\$nrconf\{restart\} = 'i';"


class NeedrestartStep:
    """Stop needrestart from prompting during apt upgrades."""

    name = "needrestart"
    title = "Disabling needrestart interactive mode"
    policy = FailurePolicy.TOLERATE

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        # Satisfied when needrestart is absent or the interactive default is gone.
        return not probe.file_has_line(self.config.needrestart_conf, INTERACTIVE_PATTERN)

    def primary(self, ctx: RunContext) -> None:
        ctx.cmd(ctx.as_root(["sed", "-i", SED_EXPR, str(self.config.needrestart_conf)]))
