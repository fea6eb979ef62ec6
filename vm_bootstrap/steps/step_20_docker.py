from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

from ..config import BootstrapConfig
from ..errors import BootstrapError
from ..lib.apt import apt_install, apt_remove_best_effort, apt_update, dpkg_architecture
from ..lib.files import write_root_file
from ..pipeline import RunContext
from ..probe import SystemProbe

logger = logging.getLogger(__name__)

KEYRING_DIR = Path("/etc/apt/keyrings")
KEYRING_PATH = KEYRING_DIR / "docker.gpg"
SOURCES_PATH = Path("/etc/apt/sources.list.d/docker.list")
OS_RELEASE = Path("/etc/os-release")


def parse_os_release(text: str) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        out[key.strip()] = value.strip().strip('"').strip("'")
    return out


def ubuntu_codename(os_release_text: str) -> str:
    info = parse_os_release(os_release_text)
    codename = info.get("UBUNTU_CODENAME") or info.get("VERSION_CODENAME")
    if not codename:
        raise BootstrapError("Cannot determine Ubuntu codename from /etc/os-release")
    return codename


def docker_sources_line(*, arch: str, codename: str, repo_url: str) -> str:
    return f"deb [arch={arch} signed-by={KEYRING_PATH}] {repo_url} {codename} stable\n"


class DockerStep:
    """Docker Engine from Docker's own apt repository (docs.docker.com/engine/install/ubuntu/)."""

    name = "docker"
    title = "Installing Docker"

    def __init__(self, config: BootstrapConfig) -> None:
        self.config = config

    def precondition(self, probe: SystemProbe) -> bool:
        return probe.has_command("docker")

    def primary(self, ctx: RunContext) -> None:
        cfg = self.config
        apt_remove_best_effort(ctx, cfg.docker_conflicting_packages)
        apt_install(ctx, ["ca-certificates", "curl", "gnupg"])

        ctx.cmd(ctx.as_root(["install", "-m", "0755", "-d", str(KEYRING_DIR)]))
        key = ctx.probe.fetch_text(cfg.docker_gpg_url)
        ctx.cmd(ctx.as_root(["gpg", "--dearmor", "--yes", "-o", str(KEYRING_PATH)]), input_text=key)
        ctx.cmd(ctx.as_root(["chmod", "a+r", str(KEYRING_PATH)]))

        codename = ubuntu_codename(ctx.probe.file_text(OS_RELEASE) or "")
        line = docker_sources_line(arch=dpkg_architecture(ctx), codename=codename, repo_url=cfg.docker_repo_url)
        write_root_file(ctx, SOURCES_PATH, line)

        apt_update(ctx)
        apt_install(ctx, cfg.docker_packages)
