"""Markdown formatting for model replies.

Model text is turned into a flat list of blocks that the chat page can draw
without knowing anything about markdown. Inline code stays inside its
paragraph as a span; fenced and indented code become their own block.
"""

from abc import ABC, abstractmethod

from markdown_it import MarkdownIt
from markdown_it.token import Token

from log_sentinel.models import Block, Span


class MarkdownFormatter(ABC):
    @abstractmethod
    def render(self, text: str) -> list[Block]:
        """Render markdown text to structured blocks."""


class MarkdownItFormatter(MarkdownFormatter):
    def __init__(self):
        self._md = MarkdownIt("commonmark")

    def render(self, text: str) -> list[Block]:
        blocks: list[Block] = []
        list_depth = 0
        heading_level: int | None = None

        for token in self._md.parse(text):
            if token.type == "list_item_open":
                list_depth += 1
            elif token.type == "list_item_close":
                list_depth -= 1
            elif token.type == "heading_open":
                heading_level = int(token.tag[1:])
            elif token.type == "heading_close":
                heading_level = None
            elif token.type in ("fence", "code_block"):
                blocks.append(Block(
                    kind="fenced_code",
                    language=token.info.strip() or None,
                    code=token.content,
                ))
            elif token.type == "inline":
                spans = self._spans(token.children or [])
                if heading_level is not None:
                    blocks.append(Block(kind="heading", level=heading_level, spans=spans))
                elif list_depth:
                    blocks.append(Block(kind="list_item", spans=spans))
                else:
                    blocks.append(Block(kind="paragraph", spans=spans))
        return blocks

    def _spans(self, children: list[Token]) -> list[Span]:
        spans: list[Span] = []
        strong = emphasis = False
        for child in children:
            if child.type == "strong_open":
                strong = True
            elif child.type == "strong_close":
                strong = False
            elif child.type == "em_open":
                emphasis = True
            elif child.type == "em_close":
                emphasis = False
            elif child.type == "code_inline":
                spans.append(Span(kind="inline_code", text=child.content))
            elif child.type in ("text", "softbreak", "hardbreak"):
                content = child.content if child.type == "text" else "\n"
                # markdown-it emits an empty text token before a leading strong/em
                if not content:
                    continue
                kind = "strong" if strong else "emphasis" if emphasis else "text"
                if spans and spans[-1].kind == kind:
                    spans[-1] = Span(kind=kind, text=spans[-1].text + content)
                else:
                    spans.append(Span(kind=kind, text=content))
        return spans
