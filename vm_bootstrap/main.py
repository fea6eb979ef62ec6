from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config import BootstrapConfig, load_config
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import RunContext, RunResult, Step, run_pipeline
from .probe import SystemProbe
from .steps import build_steps

logger = logging.getLogger(__name__)


def closing_notes(config: BootstrapConfig, probe: SystemProbe) -> List[str]:
    pub = probe.file_text(config.ssh_key_path.with_name(config.ssh_key_path.name + ".pub"))
    return [
        "",
        "NOTES:",
        "  - Log out and back in (or run 'newgrp docker') to use Docker without sudo.",
        "  - Run 'source ~/.bashrc' or open a new shell to load the new .bashrc.",
        "  - Run 'claude' to start Claude Code and authenticate.",
        f"  - nvm is available system-wide via {config.nvm_profile_path}",
        "  - Your SSH public key:",
        f"    {pub.strip() if pub else 'N/A'}",
        "",
    ]


def describe_steps(steps: List[Step]) -> List[str]:
    lines = []
    for index, step in enumerate(steps, start=1):
        deps = f" (after {', '.join(step.requires)})" if step.requires else ""
        lines.append(f"{index:2d}. {step.name} [{step.policy.value}]{deps}")
    return lines


def run(
    *,
    config: BootstrapConfig,
    probe: Optional[SystemProbe] = None,
    steps: Optional[List[Step]] = None,
    dry_run: bool = False,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> RunResult:
    """Provision this machine; returns the per-step reports."""

    probe = probe or SystemProbe(http_timeout=config.http_timeout)
    ctx = RunContext(config=config, probe=probe, dry_run=dry_run)
    steps = steps if steps is not None else build_steps(config)

    logger.info("==========================================")
    logger.info("  Ubuntu VM Setup")
    logger.info("==========================================")

    try:
        result = run_pipeline(steps=steps, ctx=ctx, start_at=start_at, stop_after=stop_after)
    except Exception:
        logger.exception("Setup failed")
        raise

    if result.ok:
        logger.info("")
        logger.info("==========================================")
        logger.info("  Setup complete!")
        logger.info("==========================================")
        for line in closing_notes(config, probe):
            logger.info("%s", line)
    else:
        logger.error("Setup stopped: %s", result.status)
    return result


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="vm-bootstrap", description="Idempotent Ubuntu VM setup")
    p.add_argument("--config", default=None, help="Path to YAML config")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to log file")
    p.add_argument("--dry-run", action="store_true", help="Log commands without running them")
    p.add_argument("--start-at", default=None, help="Start at step name (e.g. nvm)")
    p.add_argument("--stop-after", default=None, help="Stop after step name")
    p.add_argument("--list", action="store_true", help="List steps and exit")

    args = p.parse_args(argv)

    config = load_config(args.config)

    if args.list:
        print("\n".join(describe_steps(build_steps(config))))
        return 0

    configure_logging(log_path=args.log)

    result = run(
        config=config,
        dry_run=bool(args.dry_run),
        start_at=args.start_at,
        stop_after=args.stop_after,
    )
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
