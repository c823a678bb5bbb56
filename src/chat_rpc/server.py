"""FastAPI application exposing the chat RPC contract over HTTP."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional, Union

from fastapi import FastAPI, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import load_config
from .contract import MUTATION, QUERY, Router
from .errors import InputValidationError, RPCError
from .store import DEFAULT_SEED, MessageStore

logger = logging.getLogger(__name__)

BANNER = "Hello from api-server"


# -----------------------------
# Utilities
# -----------------------------
def _make_store(cfg: Dict[str, Any]) -> MessageStore:
    seed = bool(cfg.get("messages", {}).get("seed", True))
    return MessageStore(DEFAULT_SEED if seed else ())


def _base_path(cfg: Dict[str, Any]) -> str:
    base = str(cfg.get("server", {}).get("base_path") or "/trpc")
    return "/" + base.strip("/")


def _decode_input(procedure: str, raw: Union[str, bytes, None]) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError) as e:
        # ValueError covers bad JSON, undecodable bytes and oversized integers.
        raise InputValidationError(
            f'Input for "{procedure}" is not valid JSON',
            path=procedure,
            issues=[{"path": [], "message": str(e) or type(e).__name__, "code": "json_invalid"}],
        ) from e


def _envelope(data: Any) -> Dict[str, Any]:
    return {"id": None, "result": {"type": "data", "data": jsonable_encoder(data)}}


def _dispatch(router: Router, procedure: str, raw: Any, kind: str) -> JSONResponse:
    try:
        data = router.call(procedure, raw, kind=kind)
    except RPCError:
        raise
    except Exception as e:
        logger.exception("Procedure %s failed", procedure)
        raise RPCError("Internal server error", path=procedure) from e
    return JSONResponse(_envelope(data))


# -----------------------------
# App factory
# -----------------------------
def create_app(
    config_path: Optional[str] = None,
    store: Optional[MessageStore] = None,
) -> FastAPI:
    cfg = load_config(config_path)

    cors_origins = cfg.get("server", {}).get("cors_origins", ["*"])
    default_limit = int(cfg.get("messages", {}).get("default_limit", 10))
    base = _base_path(cfg)

    store = store if store is not None else _make_store(cfg)
    router = Router(store, default_limit=default_limit)

    app = FastAPI(title="Chat RPC Server", version="0.1.0")
    app.state.store = store
    app.state.router = router
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RPCError)
    async def rpc_error_handler(request: Request, exc: RPCError) -> JSONResponse:
        return JSONResponse(exc.to_envelope(), status_code=exc.http_status)

    @app.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return BANNER

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"ok": True, "messages": len(store)}

    @app.get(base + "/{procedure}")
    def query(procedure: str, input: Optional[str] = Query(default=None)) -> JSONResponse:
        return _dispatch(router, procedure, _decode_input(procedure, input), QUERY)

    @app.post(base + "/{procedure}")
    async def mutation(procedure: str, request: Request) -> JSONResponse:
        raw = _decode_input(procedure, await request.body())
        # Same threadpool the sync query route runs in.
        return await run_in_threadpool(_dispatch, router, procedure, raw, MUTATION)

    logger.info("Chat RPC mounted at %s with %d seeded messages", base, len(store))
    return app
