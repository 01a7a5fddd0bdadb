"""Redirection of the process's standard streams to files named by the runtime."""

from __future__ import annotations

import os

__all__ = ["maybe_open_stdio_fd", "redirect_stdio", "reset_stdio"]

_STREAMS = (("stdin", 0), ("stdout", 1), ("stderr", 2))

# Duplicates of the original descriptors, keyed by the descriptor they replace.
_saved: dict[int, int] = {}


def maybe_open_stdio_fd(path: str) -> int | None:
    """Open a stdio path for reading and writing and return the raw descriptor.

    The runtime may pass an empty path or one that does not exist; both mean
    the stream was intentionally not set up and give None. Any other failure
    is raised.
    """
    if not path:
        return None
    try:
        return os.open(path, os.O_RDWR)
    except FileNotFoundError:
        return None


def redirect_stdio(stdin_path: str = "", stdout_path: str = "", stderr_path: str = "") -> None:
    """Point descriptors 0, 1 and 2 at the given paths, remembering the originals.

    Streams whose path is empty or missing are left alone. The originals are
    put back by :func:`reset_stdio`.
    """
    paths = (stdin_path, stdout_path, stderr_path)
    for (name, target), path in zip(_STREAMS, paths):
        try:
            fd = maybe_open_stdio_fd(path)
        except OSError as exc:
            raise OSError(exc.errno, f"could not open {name}: {exc.strerror}", path) from exc
        if fd is None:
            continue
        if target not in _saved:
            _saved[target] = os.dup(target)
        os.dup2(fd, target)
        os.close(fd)


def reset_stdio() -> None:
    """Restore every standard descriptor replaced by :func:`redirect_stdio`."""
    while _saved:
        target, original = _saved.popitem()
        os.dup2(original, target)
        os.close(original)