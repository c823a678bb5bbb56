"""Typed RPC contract: the three chat procedures and their input validation.

Every call goes through two steps:

1. ``validate`` turns the raw (JSON-decoded) input into an :class:`Accepted`
   value or a :class:`Rejected` list of field-level issues.
2. Only accepted input reaches the resolver, and therefore the store.

Typical usage
-------------
store = MessageStore()
router = Router(store)
router.call("addMessage", {"user": "A", "message": "hi"}, kind=MUTATION)
router.call("getMessages", 1)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar, Union

from pydantic import StrictInt, TypeAdapter, ValidationError, confloat

from .errors import InputValidationError, MethodNotSupported, ProcedureNotFound
from .models import GREETING_TEXT, ChatMessage, Greeting, NewMessage
from .store import MessageStore

logger = logging.getLogger(__name__)

QUERY = "query"
MUTATION = "mutation"
DEFAULT_LIMIT = 10

T = TypeVar("T")

# Any finite JSON number; booleans and numeric strings are refused.
_LIMIT_ADAPTER = TypeAdapter(Union[StrictInt, confloat(strict=True, allow_inf_nan=False)])


# -----------------------------
# Validation outcome
# -----------------------------
@dataclass(frozen=True)
class Accepted(Generic[T]):
    value: T


@dataclass(frozen=True)
class Rejected:
    issues: List[Dict[str, Any]] = field(default_factory=list)


Outcome = Union[Accepted, Rejected]


def _issues(exc: ValidationError) -> List[Dict[str, Any]]:
    """Flatten pydantic errors into ``{path, message, code}`` dicts."""
    return [
        {"path": [str(p) for p in err.get("loc", ())], "message": err.get("msg", ""), "code": err.get("type", "")}
        for err in exc.errors()
    ]


@dataclass(frozen=True)
class Procedure:
    name: str
    kind: str
    validate: Callable[[Any], Outcome]
    resolve: Callable[[Any], Any]


# -----------------------------
# Router
# -----------------------------
class Router:
    """Binds the chat procedures to one :class:`MessageStore`."""

    def __init__(self, store: MessageStore, *, default_limit: int = DEFAULT_LIMIT) -> None:
        self.store = store
        self.default_limit = int(default_limit)
        self._procedures: Dict[str, Procedure] = {
            p.name: p
            for p in (
                Procedure("hello", QUERY, self._validate_nothing, lambda _: self.hello()),
                Procedure("greeting", QUERY, self._validate_nothing, lambda _: self.greeting()),
                Procedure("getMessages", QUERY, self._validate_limit, self.get_messages),
                Procedure("addMessage", MUTATION, self._validate_new_message, self.add_message),
            )
        }

    @property
    def procedures(self) -> Dict[str, Procedure]:
        return dict(self._procedures)

    # --------- validation ----------
    def _validate_nothing(self, raw: Any) -> Outcome:
        return Accepted(None)

    def _validate_limit(self, raw: Any) -> Outcome:
        if raw is None:
            return Accepted(self.default_limit)
        try:
            limit = _LIMIT_ADAPTER.validate_python(raw)
        except ValidationError as e:
            return Rejected(_issues(e))
        # Fractional limits truncate toward zero: 2.5 reads two messages.
        return Accepted(int(limit))

    def _validate_new_message(self, raw: Any) -> Outcome:
        try:
            return Accepted(NewMessage.model_validate(raw))
        except ValidationError as e:
            return Rejected(_issues(e))

    def validate(self, name: str, raw: Any = None) -> Outcome:
        return self._lookup(name).validate(raw)

    # --------- dispatch ----------
    def _lookup(self, name: str) -> Procedure:
        proc = self._procedures.get(name)
        if proc is None:
            logger.warning("Unknown procedure %r", name)
            raise ProcedureNotFound(f'No "{name}" procedure found', path=name)
        return proc

    def call(self, name: str, raw: Any = None, *, kind: Optional[str] = None) -> Any:
        """Validate ``raw`` and run procedure ``name``.

        Raises
        ------
        ProcedureNotFound
            No procedure with that name.
        MethodNotSupported
            ``kind`` is given and differs from the procedure's kind.
        InputValidationError
            Input was rejected; the store was not touched.
        """
        proc = self._lookup(name)
        if kind is not None and kind != proc.kind:
            raise MethodNotSupported(f'"{name}" is a {proc.kind}, not a {kind}', path=name)

        outcome = proc.validate(raw)
        if isinstance(outcome, Rejected):
            logger.warning("Rejected input for %s: %s", name, outcome.issues)
            raise InputValidationError(f'Invalid input for "{name}"', path=name, issues=outcome.issues)
        return proc.resolve(outcome.value)

    # --------- operations ----------
    def hello(self) -> str:
        return GREETING_TEXT

    def greeting(self) -> Greeting:
        return Greeting()

    def get_messages(self, limit: int) -> List[ChatMessage]:
        return self.store.tail(limit)

    def add_message(self, payload: NewMessage) -> NewMessage:
        """Append the message and echo the accepted payload back."""
        entry = self.store.append(payload.user, payload.message)
        logger.info("Appended message %s from %r", entry.id, entry.user)
        return payload
