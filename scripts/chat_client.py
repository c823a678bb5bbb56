"""Command-line client for the chat RPC server."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

import httpx

SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from chat_rpc.client import DEFAULT_URL, ChatClient  # noqa: E402
from chat_rpc.errors import RPCError  # noqa: E402


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Talk to a chat RPC server.")
    parser.add_argument(
        "--url",
        default=os.environ.get("CHAT_RPC_URL", DEFAULT_URL),
        help=f"RPC base URL (default: {DEFAULT_URL})",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("greet", help="Print the server greeting")
    p_list = sub.add_parser("list", help="Print the most recent messages")
    p_list.add_argument("--limit", type=int, default=None, help="How many messages (server default: 10)")
    p_send = sub.add_parser("send", help="Post a message")
    p_send.add_argument("user")
    p_send.add_argument("message")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)

    with ChatClient(args.url) as client:
        try:
            if args.command == "greet":
                print(client.greeting().message)
            elif args.command == "list":
                for m in client.get_messages(args.limit):
                    print(f"{m.user}: {m.message}")
            else:
                sent = client.add_message(args.user, args.message)
                print(f"sent as {sent.user}")
        except RPCError as e:
            print(f"error [{e.code}]: {e.message}", file=sys.stderr)
            for issue in e.issues:
                print(f"  {'.'.join(issue.get('path') or []) or '<input>'}: {issue.get('message')}", file=sys.stderr)
            return 1
        except httpx.HTTPError as e:
            print(f"error: cannot reach {args.url}: {e}", file=sys.stderr)
            return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
