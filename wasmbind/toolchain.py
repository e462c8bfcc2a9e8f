"""Invocation of external tools: the module dumper and version control."""

from __future__ import annotations

import logging
import subprocess

from .errors import ToolError

logger = logging.getLogger(__name__)

UNKNOWN_VERSION = "unknown"


def _run(args: list[str], cwd: str | None = None, timeout_s: int = 300) -> str:
    """Run a command and return its stdout, raising ToolError on failure."""
    logger.info("Running command: %s", " ".join(args))
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            check=True,
            text=True,
            encoding="utf-8",
            capture_output=True,
            timeout=timeout_s,
            stdin=subprocess.DEVNULL,
        )
    except FileNotFoundError as exc:
        raise ToolError(f"Executable not found: {args[0]}") from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise ToolError(
            f"{args[0]} failed (exit={exc.returncode}): {stderr or 'no output'}"
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise ToolError(f"{args[0]} timed out after {timeout_s}s") from exc
    except UnicodeDecodeError as exc:
        raise ToolError(f"{args[0]} produced output that is not valid text: {exc}") from exc
    return result.stdout


def run_objdump(wasm_path: str, objdump: str = "wasm-objdump") -> str:
    """Return the full introspection dump (`-x`) of a module."""
    return _run([objdump, "-x", wasm_path])


def describe_version(cwd: str | None = None, git: str = "git") -> str:
    """Return `git describe` output, or "unknown" outside a usable checkout."""
    try:
        version = _run([git, "describe", "--tags", "--always", "--dirty"], cwd=cwd).strip()
    except ToolError as exc:
        logger.info("Version lookup failed, using '%s': %s", UNKNOWN_VERSION, exc)
        return UNKNOWN_VERSION
    return version or UNKNOWN_VERSION
