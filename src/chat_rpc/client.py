"""Typed httpx client for the chat RPC endpoints."""
from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

import httpx

from .errors import RPCError
from .models import ChatMessage, Greeting, NewMessage

logger = logging.getLogger(__name__)

DEFAULT_URL = "http://localhost:8080/trpc"
TIMEOUT = httpx.Timeout(connect=5.0, read=10.0, write=10.0, pool=5.0)


class ChatClient:
    """Call ``hello``, ``greeting``, ``getMessages`` and ``addMessage`` on a chat RPC server.

    An existing ``httpx.Client`` may be injected (for example FastAPI's
    ``TestClient``); it is then left open on :meth:`close`.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        *,
        http: Optional[httpx.Client] = None,
        timeout: httpx.Timeout = TIMEOUT,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(timeout=timeout)

    # --------- transport ----------
    def _url(self, procedure: str) -> str:
        return f"{self.base_url}/{procedure}"

    def _unwrap(self, resp: httpx.Response) -> Any:
        try:
            body = resp.json()
        except ValueError:
            resp.raise_for_status()
            raise RPCError(f"Unexpected non-JSON response ({resp.status_code})")
        if not isinstance(body, dict):
            raise RPCError(f"Unexpected response shape ({resp.status_code})")
        if "error" in body:
            err = RPCError.from_envelope(body)
            logger.debug("RPC error from %s: %r", resp.request.url, err)
            raise err
        if not isinstance(body.get("result"), dict):
            # Not an RPC envelope, e.g. a framework 404 for the wrong base path.
            resp.raise_for_status()
            raise RPCError(f"Unexpected response shape ({resp.status_code})")
        return body["result"].get("data")

    def query(self, procedure: str, input: Any = None) -> Any:
        params = {} if input is None else {"input": json.dumps(input)}
        return self._unwrap(self._http.get(self._url(procedure), params=params))

    def mutate(self, procedure: str, input: Any = None) -> Any:
        return self._unwrap(self._http.post(self._url(procedure), json=input))

    # --------- procedures ----------
    def hello(self) -> str:
        return str(self.query("hello"))

    def greeting(self) -> Greeting:
        return Greeting.model_validate(self.query("greeting"))

    def get_messages(self, limit: Optional[int] = None) -> List[ChatMessage]:
        data = self.query("getMessages", limit)
        return [ChatMessage.model_validate(m) for m in data or []]

    def add_message(self, user: str, message: str) -> NewMessage:
        data = self.mutate("addMessage", {"user": user, "message": message})
        return NewMessage.model_validate(data)

    # --------- lifecycle ----------
    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "ChatClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
