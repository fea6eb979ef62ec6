from __future__ import annotations

from typing import Sequence


class BootstrapError(Exception):
    """Base class for failures a step may recover from (fallback/tolerate)."""


class NetworkUnavailable(BootstrapError):
    """A fetch failed or returned content that cannot be used."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason


class SubprocessFailed(BootstrapError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


class PermissionDenied(SubprocessFailed):
    """A privileged operation was rejected (sudo refused, EPERM, EACCES)."""


class StepOrderError(BootstrapError):
    pass


class FileWriteFailed(BootstrapError):
    def __init__(self, path: str, error: OSError) -> None:
        super().__init__(f"{path}: {error.strerror or error}")
        self.path = path


class UnmetDependency(BootstrapError):
    """A required step outside the selected range is not satisfied."""
