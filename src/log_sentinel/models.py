from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FileKind = Literal["log", "config"]
Role = Literal["user", "model", "system"]


class LogFile(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    content: str
    kind: FileKind


class RepoContext(BaseModel):
    repo_url: str = ""
    branch: str = "main"
    build_version: str = ""
    has_access: bool = False
    custom_snippet: str | None = None


class Message(BaseModel):
    id: str
    role: Role
    text: str
    timestamp: datetime = Field(default_factory=datetime.now)
    is_thinking: bool = False


class HistoryTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class Span(BaseModel):
    kind: Literal["text", "strong", "emphasis", "inline_code"]
    text: str


class Block(BaseModel):
    kind: Literal["paragraph", "heading", "list_item", "fenced_code"]
    spans: list[Span] = Field(default_factory=list)
    level: int | None = None
    language: str | None = None
    code: str | None = None


class RenderedMessage(BaseModel):
    id: str
    role: Role
    text: str
    time: str
    blocks: list[Block] | None = None
    preformatted: str | None = None
    is_thinking: bool = False


class SubmitRequest(BaseModel):
    text: str = ""


class SessionView(BaseModel):
    id: str
    state: Literal["idle", "in_flight"]
    files: list[LogFile]
    repo_context: RepoContext
    messages: list[RenderedMessage]


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    message: str
