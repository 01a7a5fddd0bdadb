"""Helpers that read an OCI runtime spec (as parsed config.json) for a WASI module."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, BinaryIO, Mapping, Sequence

__all__ = [
    "env_to_wasi",
    "env_to_pairs",
    "get_wasm_mounts",
    "module_path",
    "maybe_open_stdio",
]

_WASM_MOUNT_TYPES = ("bind", "tmpfs")


def _process(spec: Mapping[str, Any]) -> Mapping[str, Any]:
    process = spec.get("process")
    if process is None:
        raise ValueError("spec has no process")
    return process


def env_to_wasi(spec: Mapping[str, Any]) -> list[str]:
    """Return the process environment as ``KEY=VALUE`` strings."""
    return list(_process(spec).get("env") or [])


def env_to_pairs(spec: Mapping[str, Any]) -> list[tuple[str, str]]:
    """Return the process environment split at the first ``=`` into pairs."""
    pairs = []
    for entry in env_to_wasi(spec):
        key, _, value = entry.partition("=")
        pairs.append((key, value))
    return pairs


def get_wasm_mounts(spec: Mapping[str, Any]) -> list[str]:
    """Return the destinations of the spec's bind and tmpfs mounts."""
    return [
        mount["destination"]
        for mount in spec.get("mounts") or []
        if mount.get("type") in _WASM_MOUNT_TYPES and mount.get("destination") is not None
    ]


def module_path(root: str | os.PathLike[str], args: Sequence[str]) -> Path:
    """Resolve the module named by the first argument inside the root filesystem."""
    if not args:
        raise ValueError("args is not set")
    command = args[0]
    if command.startswith(os.sep):
        command = command[len(os.sep):]
    return Path(root) / command


def maybe_open_stdio(path: str) -> BinaryIO | None:
    """Open a stdio path for reading and writing.

    An empty or non-existent path means the stream was not set up and gives
    None; any other failure is raised.
    """
    if not path:
        return None
    try:
        return open(path, "r+b", buffering=0)
    except FileNotFoundError:
        return None