"""External process gateway: run a tool and collect its stdout."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import structlog

from package_scraper.exceptions import ProcessLaunchError

log = structlog.get_logger("package_scraper.process")


async def run_command(
    cwd: Path | str,
    cmd: str,
    args: list[str],
    *,
    env: dict[str, str] | None = None,
) -> str:
    """Run *cmd* with *args* inside *cwd* and return everything it wrote to stdout.

    The exit code is not checked: audit tools exit non-zero when they find
    something and still print usable JSON, so whatever was written before
    the process exited is returned as-is.

    Raises ``ProcessLaunchError`` if the process cannot be spawned.
    """
    proc_env = dict(os.environ)
    if env:
        proc_env.update(env)

    try:
        proc = await asyncio.create_subprocess_exec(
            cmd,
            *args,
            cwd=str(cwd),
            env=proc_env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ProcessLaunchError(cmd, exc.strerror or str(exc)) from exc

    stdout, stderr = await proc.communicate()
    output = stdout.decode("utf-8", errors="replace")

    log.debug(
        "process.exited",
        cmd=cmd,
        args=args,
        cwd=str(cwd),
        returncode=proc.returncode,
        stdout_bytes=len(stdout),
        stderr=stderr.decode("utf-8", errors="replace").strip()[:500] or None,
    )
    return output
