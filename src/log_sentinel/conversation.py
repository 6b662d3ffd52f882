import enum
import itertools
import logging

from log_sentinel import llm, models, prompts

logger = logging.getLogger(__name__)

WELCOME_ID = "welcome"


class EmptySubmissionError(Exception):
    pass


class ConversationBusyError(Exception):
    pass


class RequestState(str, enum.Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


class Conversation:
    """Append-only message log plus the single in-flight request flag."""

    def __init__(self):
        self._ids = itertools.count(1)
        self.state = RequestState.IDLE
        self.messages: list[models.Message] = [
            models.Message(id=WELCOME_ID, role="model", text=prompts.WELCOME_MESSAGE),
        ]

    def next_id(self) -> str:
        return f"msg-{next(self._ids)}"

    def append(self, role: models.Role, text: str) -> models.Message:
        message = models.Message(id=self.next_id(), role=role, text=text)
        self.messages.append(message)
        return message

    async def submit(
        self,
        text: str,
        files: list[models.LogFile],
        repo_context: models.RepoContext,
        client: llm.AnalysisClient,
    ) -> models.Message:
        if self.state is RequestState.IN_FLIGHT:
            raise ConversationBusyError("An analysis request is already in progress")
        if not text.strip() and not files:
            raise EmptySubmissionError("Enter a message or attach at least one file")

        history = list(self.messages)
        self.append("user", text)
        self.state = RequestState.IN_FLIGHT
        try:
            reply = await client.analyze(text, history, list(files), repo_context)
        finally:
            self.state = RequestState.IDLE

        return self.append("model", reply)
