from __future__ import annotations

import grp
import logging
import pwd
import re
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Union

import httpx

from .lib.fetch import fetch_latest_release_tag, fetch_script, fetch_text

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SystemProbe:
    """Read-only queries against the live machine.

    Nothing is cached: every call looks at the machine again, so a probe
    can be reused across steps and still see the effects of earlier steps.
    """

    def __init__(self, *, http_client: Optional[httpx.Client] = None, http_timeout: float = 30.0) -> None:
        self._http_client = http_client
        self._http_timeout = http_timeout

    def has_command(self, name: str) -> bool:
        return shutil.which(name) is not None

    def path_exists(self, path: PathLike) -> bool:
        return Path(path).expanduser().exists()

    def file_nonempty(self, path: PathLike) -> bool:
        p = Path(path).expanduser()
        try:
            return p.is_file() and p.stat().st_size > 0
        except OSError:
            return False

    def file_text(self, path: PathLike) -> Optional[str]:
        """File contents with line endings untranslated, or None if unreadable."""
        p = Path(path).expanduser()
        try:
            with open(p, encoding="utf-8", newline="") as f:
                return f.read()
        except (OSError, UnicodeDecodeError):
            return None

    def file_has_line(self, path: PathLike, pattern: str) -> bool:
        text = self.file_text(path)
        if text is None:
            return False
        return re.search(pattern, text, flags=re.MULTILINE) is not None

    def glob_exists(self, base: PathLike, pattern: str) -> bool:
        root = Path(base).expanduser()
        try:
            return any(True for _ in root.glob(pattern))
        except OSError:
            return False

    def path_mtime(self, path: PathLike) -> Optional[float]:
        try:
            return Path(path).expanduser().stat().st_mtime
        except OSError:
            return None

    def user_in_group(self, user: str, group: str) -> bool:
        """Membership as recorded in the group database (not the current session)."""
        try:
            g = grp.getgrnam(group)
        except KeyError:
            return False
        if user in g.gr_mem:
            return True
        try:
            return pwd.getpwnam(user).pw_gid == g.gr_gid
        except KeyError:
            return False

    def package_installed(self, package: str) -> bool:
        """True when dpkg reports the package in 'install ok installed' state."""
        if shutil.which("dpkg-query") is None:
            return False
        p = subprocess.run(
            ["dpkg-query", "-W", "-f=${Status}", package],
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
        return p.returncode == 0 and p.stdout.strip().endswith("installed") and "not-installed" not in p.stdout

    def fetch_text(self, url: str) -> str:
        """GET a remote resource. Raises NetworkUnavailable on any failure."""
        return fetch_text(url, client=self._http_client, timeout=self._http_timeout)

    def latest_release_tag(self, api_url: str) -> str:
        return fetch_latest_release_tag(api_url, client=self._http_client, timeout=self._http_timeout)

    def fetch_script(self, url: str) -> str:
        """Like fetch_text, but HTML error pages and non-scripts are NetworkUnavailable."""
        return fetch_script(url, client=self._http_client, timeout=self._http_timeout)
