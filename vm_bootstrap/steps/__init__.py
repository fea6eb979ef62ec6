from __future__ import annotations

from typing import Any, List

from ..config import BootstrapConfig
from ..pipeline import FailurePolicy, Step
from .step_05_needrestart import NeedrestartStep
from .step_10_system_packages import SystemPackagesStep
from .step_20_docker import DockerStep
from .step_25_docker_group import DockerGroupStep
from .step_30_tmux import TmuxStep
from .step_40_nvm import NvmStep
from .step_45_nvm_profile import NvmProfileStep
from .step_50_node import NodeStep
from .step_60_claude import ClaudeStep
from .step_70_uv import UvStep
from .step_80_ssh_key import SshKeyStep
from .step_85_ssh_keepalive import SshKeepaliveStep
from .step_90_bashrc import BashrcStep

__all__ = [
    "NeedrestartStep",
    "SystemPackagesStep",
    "DockerStep",
    "DockerGroupStep",
    "TmuxStep",
    "NvmStep",
    "NvmProfileStep",
    "NodeStep",
    "ClaudeStep",
    "UvStep",
    "SshKeyStep",
    "SshKeepaliveStep",
    "BashrcStep",
    "as_step",
    "build_steps",
]


def as_step(obj: Any) -> Step:
    """Turn a step class instance into the sequencer's Step record."""

    return Step(
        name=obj.name,
        title=getattr(obj, "title", ""),
        precondition=obj.precondition,
        primary=obj.primary,
        fallback=getattr(obj, "fallback", None),
        policy=getattr(obj, "policy", FailurePolicy.FATAL),
        requires=tuple(getattr(obj, "requires", ())),
    )


def build_steps(config: BootstrapConfig) -> List[Step]:
    # Order matters: nvm -> node -> claude.
    return [
        as_step(s)
        for s in (
            NeedrestartStep(config),
            SystemPackagesStep(config),
            DockerStep(config),
            DockerGroupStep(config),
            TmuxStep(config),
            NvmStep(config),
            NvmProfileStep(config),
            NodeStep(config),
            ClaudeStep(config),
            UvStep(config),
            SshKeyStep(config),
            SshKeepaliveStep(config),
            BashrcStep(config),
        )
    ]
