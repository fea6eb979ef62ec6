from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..pipeline import RunContext

# Shared nvm installs live in a root-owned directory, so nvm commands run as root.
NODE_BIN_GLOB = "versions/node/*/bin/{name}"


def profile_snippet(nvm_dir: str) -> str:
    return (
        f'export NVM_DIR="{nvm_dir}"\n'
        '[ -s "$NVM_DIR/nvm.sh" ] && \\. "$NVM_DIR/nvm.sh"\n'
        '[ -s "$NVM_DIR/bash_completion" ] && \\. "$NVM_DIR/bash_completion"\n'
    )


def nvm_shell_argv(ctx: "RunContext", command: str) -> list[str]:
    """argv running `command` in a bash that has sourced nvm.sh."""

    nvm_dir = str(ctx.config.nvm_dir)
    script = f'. {shlex.quote(nvm_dir + "/nvm.sh")} && {command}'
    return ctx.as_root(["env", f"NVM_DIR={nvm_dir}", "bash", "-c", script])


def open_permissions(ctx: "RunContext") -> None:
    ctx.cmd(ctx.as_root(["chmod", "-R", "a+rx", str(ctx.config.nvm_dir)]))
