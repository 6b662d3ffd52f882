from log_sentinel import models
from log_sentinel.conversation import Conversation, RequestState
from log_sentinel.formatting import MarkdownFormatter

THINKING_ID = "thinking"
THINKING_TEXT = "Thinking process initiated..."


def render_message(message: models.Message, formatter: MarkdownFormatter) -> models.RenderedMessage:
    rendered = models.RenderedMessage(
        id=message.id,
        role=message.role,
        text=message.text,
        time=message.timestamp.strftime("%H:%M"),
        is_thinking=message.is_thinking,
    )
    if message.role == "model":
        rendered.blocks = formatter.render(message.text)
    else:
        rendered.preformatted = message.text
    return rendered


def render_conversation(
    conversation: Conversation, formatter: MarkdownFormatter
) -> list[models.RenderedMessage]:
    rendered = [render_message(m, formatter) for m in conversation.messages]
    if conversation.state is RequestState.IN_FLIGHT:
        placeholder = models.Message(id=THINKING_ID, role="model", text=THINKING_TEXT, is_thinking=True)
        rendered.append(render_message(placeholder, formatter))
    return rendered
