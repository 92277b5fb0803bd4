"""Query the Go toolchain for packages matching selector patterns."""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from structlit.constants import ERROR_TRUNCATION_CHARS
from structlit.loading.schemas import GoListPackage

logger = logging.getLogger(__name__)


class PackageLoadError(RuntimeError):
    """The requested packages could not be resolved, parsed or listed."""


def build_command(
    go_binary: str,
    patterns: Sequence[str],
    build_tags: Sequence[str] = (),
) -> list[str]:
    """Assemble the ``go list`` invocation for ``patterns``."""
    cmd = [go_binary, "list", "-e", "-json", "-deps"]
    if build_tags:
        cmd.append("-tags=" + ",".join(build_tags))
    cmd.append("--")
    cmd.extend(patterns)
    return cmd


def decode_stream(output: str) -> list[GoListPackage]:
    """Decode the concatenated JSON objects ``go list -json`` prints."""
    decoder = json.JSONDecoder()
    packages: list[GoListPackage] = []
    pos = 0
    end = len(output)
    while True:
        while pos < end and output[pos].isspace():
            pos += 1
        if pos >= end:
            break
        try:
            obj, pos = decoder.raw_decode(output, pos)
            packages.append(GoListPackage.model_validate(obj))
        except (json.JSONDecodeError, ValidationError) as exc:
            msg = f"unexpected go list output: {exc}"
            raise PackageLoadError(msg) from exc
    return packages


async def run_go_list(
    patterns: Sequence[str],
    *,
    go_binary: str = "go",
    build_tags: Sequence[str] = (),
    work_dir: Path | None = None,
    timeout: float = 300,
    cancel: asyncio.Event | None = None,
) -> list[GoListPackage]:
    """Run ``go list`` and return every package it reports, deps included.

    Setting ``cancel`` kills the subprocess and raises
    :class:`PackageLoadError`.
    """
    cmd = build_command(go_binary, patterns, build_tags)
    logger.debug("Running %s", " ".join(cmd))
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(work_dir) if work_dir is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as exc:
        msg = f"go toolchain not found: {go_binary}"
        raise PackageLoadError(msg) from exc

    communicate = asyncio.ensure_future(proc.communicate())
    waiters: set[asyncio.Future[Any]] = {communicate}
    cancel_wait: asyncio.Future[Any] | None = None
    if cancel is not None:
        cancel_wait = asyncio.ensure_future(cancel.wait())
        waiters.add(cancel_wait)
    try:
        done, _ = await asyncio.wait(
            waiters,
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        if cancel_wait is not None:
            cancel_wait.cancel()

    if communicate not in done:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await communicate
        if cancel is not None and cancel.is_set():
            raise PackageLoadError("loading cancelled")
        msg = f"go list timed out after {timeout:g}s"
        raise PackageLoadError(msg)

    stdout, stderr = communicate.result()
    if proc.returncode != 0:
        detail = stderr.decode(errors="replace").strip()
        msg = (
            f"go list exited with status {proc.returncode}: "
            f"{detail[:ERROR_TRUNCATION_CHARS]}"
        )
        raise PackageLoadError(msg)
    for line in stderr.decode(errors="replace").splitlines():
        if line.strip():
            logger.warning("go list: %s", line)

    packages = decode_stream(stdout.decode("utf-8", errors="replace"))
    logger.debug("go list reported %d packages", len(packages))
    return packages
