from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_CONFIG_PATH = "~/.config/vm-bootstrap/config.yaml"

DEFAULT_DOCKER_PACKAGES = [
    "docker-ce",
    "docker-ce-cli",
    "containerd.io",
    "docker-buildx-plugin",
    "docker-compose-plugin",
]

DEFAULT_DOCKER_CONFLICTS = [
    "docker.io",
    "docker-doc",
    "docker-compose",
    "docker-compose-v2",
    "podman-docker",
    "containerd",
    "runc",
]


@dataclass(frozen=True)
class BootstrapConfig:
    raw: Dict[str, Any]

    def _get(self, key: str, default: Any) -> Any:
        value = self.raw.get(key)
        return default if value is None else value

    @property
    def user(self) -> str:
        return str(self._get("user", os.environ.get("USER") or getpass.getuser()))

    @property
    def home(self) -> Path:
        return Path(str(self._get("home", "~"))).expanduser()

    @property
    def use_sudo(self) -> bool:
        # Root needs no sudo prefix.
        if hasattr(os, "geteuid") and os.geteuid() == 0:
            return False
        return bool(self._get("sudo", True))

    @property
    def nvm_dir(self) -> Path:
        return Path(str(self._get("nvm_dir", "/usr/local/nvm")))

    @property
    def nvm_profile_path(self) -> Path:
        return Path(str(self._get("nvm_profile_path", "/etc/profile.d/nvm.sh")))

    @property
    def nvm_release_api(self) -> str:
        return str(self._get("nvm_release_api", "https://api.github.com/repos/nvm-sh/nvm/releases/latest"))

    def nvm_install_url(self, tag: str) -> str:
        base = str(self._get("nvm_install_base", "https://raw.githubusercontent.com/nvm-sh/nvm"))
        return f"{base.rstrip('/')}/{tag}/install.sh"

    @property
    def claude_install_url(self) -> str:
        return str(self._get("claude_install_url", "https://claude.ai/install.sh"))

    @property
    def claude_npm_package(self) -> str:
        return str(self._get("claude_npm_package", "@anthropic-ai/claude-code"))

    @property
    def uv_install_url(self) -> str:
        return str(self._get("uv_install_url", "https://astral.sh/uv/install.sh"))

    @property
    def docker_gpg_url(self) -> str:
        return str(self._get("docker_gpg_url", "https://download.docker.com/linux/ubuntu/gpg"))

    @property
    def docker_repo_url(self) -> str:
        return str(self._get("docker_repo_url", "https://download.docker.com/linux/ubuntu"))

    @property
    def docker_packages(self) -> List[str]:
        return [str(p) for p in self._get("docker_packages", DEFAULT_DOCKER_PACKAGES)]

    @property
    def docker_conflicting_packages(self) -> List[str]:
        return [str(p) for p in self._get("docker_conflicting_packages", DEFAULT_DOCKER_CONFLICTS)]

    @property
    def sshd_config(self) -> Path:
        return Path(str(self._get("sshd_config", "/etc/ssh/sshd_config")))

    @property
    def ssh_client_alive_interval(self) -> int:
        return int(self._get("ssh_client_alive_interval", 60))

    @property
    def ssh_client_alive_count_max(self) -> int:
        return int(self._get("ssh_client_alive_count_max", 120))

    @property
    def ssh_key_path(self) -> Path:
        return self.home / ".ssh" / "id_ed25519"

    @property
    def bashrc_url(self) -> str:
        return str(self._get("bashrc_url", "https://raw.githubusercontent.com/eakot/setup/main/.bashrc"))

    @property
    def bashrc_path(self) -> Path:
        return self.home / ".bashrc"

    @property
    def needrestart_conf(self) -> Path:
        return Path(str(self._get("needrestart_conf", "/etc/needrestart/needrestart.conf")))

    @property
    def apt_lists_dir(self) -> Path:
        return Path(str(self._get("apt_lists_dir", "/var/lib/apt/lists")))

    @property
    def apt_max_age_hours(self) -> float:
        return float(self._get("apt_max_age_hours", 6))

    @property
    def http_timeout(self) -> float:
        return float(self._get("http_timeout", 30.0))


def load_config(path: Optional[str] = None) -> BootstrapConfig:
    """Load YAML config.

    With no explicit path, the per-user default is used if present; otherwise
    built-in defaults apply. An explicit path that does not exist is an error.
    """

    if path is None:
        p = Path(DEFAULT_CONFIG_PATH).expanduser()
        if not p.exists():
            return BootstrapConfig(raw={})
    else:
        p = Path(path).expanduser()
        if not p.exists():
            raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("config must be YAML")

    raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{p} must contain a mapping/object")

    return BootstrapConfig(raw=raw)
