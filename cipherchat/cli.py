"""Command-line entry point: start the chat server or a chat client."""

from __future__ import annotations

import asyncio
import sys

from cipherchat.client import run_client
from cipherchat.server import ChatServer


def main(argv: list[str] | None = None) -> int:
    """Run ``server`` or ``client`` as named by the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: cipherchat [server|client]", file=sys.stderr)
        return 0

    mode = args[0]
    try:
        if mode == "server":
            asyncio.run(ChatServer().serve())
        elif mode == "client":
            asyncio.run(run_client())
        else:
            print("Invalid argument. use 'server' or 'client'.", file=sys.stderr)
    except KeyboardInterrupt:
        pass
    return 0


if __name__ == "__main__":
    sys.exit(main())