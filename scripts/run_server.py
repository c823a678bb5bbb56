"""Script to launch the chat RPC server."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

import uvicorn

# Ensure src/ is on sys.path (so imports work when run directly)
SRC_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)

from chat_rpc.config import load_config  # noqa: E402
from chat_rpc.server import create_app  # noqa: E402


def main(argv: Optional[List[str]] = None) -> None:
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML config file (default: $CHAT_RPC_CONFIG or config/default.yaml)",
    )
    known, _ = pre.parse_known_args(argv)

    cfg = load_config(known.config)
    server_cfg = cfg.get("server", {})

    parser = argparse.ArgumentParser(description="Run the chat RPC server.", parents=[pre])
    parser.add_argument(
        "--host",
        type=str,
        default=os.environ.get("HOST", server_cfg.get("host", "127.0.0.1")),
        help="Host to bind the server to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", server_cfg.get("port", 8080))),
        help="Port to bind the server to (default: 8080)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    app = create_app(args.config)
    logging.getLogger("chat_rpc").info("api-server listening at http://%s:%d", args.host, args.port)

    # Single worker: the message store lives in this process.
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
