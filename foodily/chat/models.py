from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

MAX_TURNS = 6


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=1000)


class ChatResponseType(str, Enum):
    answer = "answer"
    fallback = "fallback"


class ChatResponse(BaseModel):
    type: ChatResponseType
    message: str


class ConversationTurn(BaseModel):
    role: str
    content: str


class ConversationState(BaseModel):
    turns: list[ConversationTurn] = Field(default_factory=list)

    def add_exchange(self, user_message: str, reply: str) -> None:
        """Append one user/assistant exchange, keeping the last ``MAX_TURNS`` turns."""
        self.turns.append(ConversationTurn(role="user", content=user_message))
        self.turns.append(ConversationTurn(role="assistant", content=reply))
        self.turns = self.turns[-MAX_TURNS:]

    def as_messages(self) -> list[dict[str, str]]:
        return [t.model_dump() for t in self.turns]
