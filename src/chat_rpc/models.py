"""Pydantic shapes shared by the store, the RPC contract and the client."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictStr

GREETING_TEXT = "Greetings from /trpc/hello :)"


class ChatMessage(BaseModel):
    """A single stored chat message. Frozen once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="uuid4 assigned on append.")
    user: str
    message: str


class NewMessage(BaseModel):
    """Input (and echoed output) of the ``addMessage`` mutation."""

    model_config = ConfigDict(extra="ignore")

    user: StrictStr = Field(..., description="Display name of the author.")
    message: StrictStr = Field(..., description="Message text.")


class Greeting(BaseModel):
    message: str = GREETING_TEXT
