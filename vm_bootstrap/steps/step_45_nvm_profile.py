from __future__ import annotations

from ..config import BootstrapConfig
from ..lib.files import write_root_file
from ..lib.nvm import profile_snippet
from ..pipeline import RunContext
from ..probe import SystemProbe


class NvmProfileStep:
    """Make nvm available to every login shell via /etc/profile.d."""

    name = "nvm_profile"
    title = "Publishing nvm profile snippet"
    requires = ("nvm",)

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.file_text(self.config.nvm_profile_path) == profile_snippet(str(self.config.nvm_dir))

    def primary(self, ctx: RunContext) -> None:
        path = self.config.nvm_profile_path
        write_root_file(ctx, path, profile_snippet(str(self.config.nvm_dir)))
        ctx.cmd(ctx.as_root(["chmod", "+r", str(path)]))
