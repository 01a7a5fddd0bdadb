"""A small demonstration program: echo, sleep, exit, write or sing forever."""

from __future__ import annotations

import sys
from time import sleep

__all__ = ["main", "SONG"]

SONG = (
    "This is a song that never ends.\n"
    "Yes, it goes on and on my friends.\n"
    "Some people started singing it not knowing what it was,\n"
    "So they'll continue singing it forever just because...\n"
)


def _argument(args: list[str], index: int, command: str) -> str:
    try:
        return args[index]
    except IndexError:
        raise ValueError(f"{command}: missing argument") from None


def _daemon() -> None:
    while True:
        print(SONG, flush=True)
        sleep(1)


def main(argv: list[str] | None = None) -> int:
    """Run the command named by the first argument; ``daemon`` when there is none."""
    args = list(sys.argv[1:] if argv is None else argv)
    command = args[0] if args else "daemon"

    if command == "echo":
        print(" ".join(args[1:]))
    elif command == "sleep":
        sleep(float(_argument(args, 1, command)))
    elif command == "exit":
        raise SystemExit(int(_argument(args, 1, command)))
    elif command == "write":
        path = _argument(args, 1, command)
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(" ".join(args[2:]))
    elif command == "daemon":
        _daemon()
    else:
        print(f"unknown command: {command}", file=sys.stderr)
        return 1

    print("exiting", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())