from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from ..errors import SubprocessFailed

if TYPE_CHECKING:
    from ..pipeline import RunContext

logger = logging.getLogger(__name__)

# Passed explicitly on the sudo command line so they survive the privilege change.
NONINTERACTIVE_ENV = {
    "NEEDRESTART_MODE": "a",
    "NEEDRESTART_SUSPEND": "1",
    "DEBIAN_FRONTEND": "noninteractive",
}


def apt_get_argv(ctx: "RunContext", *args: str) -> list[str]:
    env_args = [f"{k}={v}" for k, v in NONINTERACTIVE_ENV.items()]
    if ctx.config.use_sudo:
        return ["sudo", *env_args, "apt-get", *args]
    return ["env", *env_args, "apt-get", *args]


def apt_update(ctx: "RunContext") -> None:
    ctx.cmd(apt_get_argv(ctx, "update", "-y"))


def apt_upgrade(ctx: "RunContext") -> None:
    ctx.cmd(apt_get_argv(ctx, "upgrade", "-y"))


def apt_install(ctx: "RunContext", packages: Sequence[str]) -> None:
    if not packages:
        return
    ctx.cmd(apt_get_argv(ctx, "install", "-y", *packages))


def apt_remove_best_effort(ctx: "RunContext", packages: Sequence[str]) -> None:
    """Remove packages, ignoring the ones apt doesn't know about."""
    if not packages:
        return
    try:
        ctx.cmd(apt_get_argv(ctx, "remove", "-y", *packages))
    except SubprocessFailed:
        logger.info("Non-fatal: could not remove %s", " ".join(packages))


def dpkg_architecture(ctx: "RunContext") -> str:
    if ctx.dry_run:
        return "amd64"
    return ctx.cmd(["dpkg", "--print-architecture"]).stdout.strip() or "amd64"
