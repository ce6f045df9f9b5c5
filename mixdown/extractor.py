from __future__ import annotations

import enum
import html
import logging
import re
import xml.etree.ElementTree as etree
from dataclasses import dataclass
from typing import Iterator, Optional, Union

import markdown
from markdown.extensions import Extension
from markdown.treeprocessors import Treeprocessor
from markdown.util import HTML_PLACEHOLDER_RE

from .errors import ParseError

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "codehilite"]
MARKDOWN_EXTENSION_CONFIGS = {"codehilite": {"guess_lang": False}}

Node = Union[etree.Element, str]
TAG_RE = re.compile(r"<[^>]+>")


class Phase(enum.Enum):
    AWAITING_TITLE = "awaiting-title"
    AWAITING_SUMMARY = "awaiting-summary"
    DONE = "done"


@dataclass(frozen=True)
class Extraction:
    subject: str
    summary: str
    body: str


def walk(root: etree.Element) -> Iterator[tuple[Node, bool]]:
    """Yield ``(node, entering)`` pairs for a pre/post-order walk of ``root``.

    Elements are reported twice, on entry and on exit. Literal text held in
    ``element.text`` and in each child's ``tail`` is reported once as a plain
    string leaf with ``entering`` set.
    """
    yield root, True
    if root.text:
        yield root.text, True
    for child in root:
        yield from walk(child)
        if child.tail:
            yield child.tail, True
    yield root, False


def is_paragraph(node: etree.Element) -> bool:
    # fenced code and raw html blocks are stashed as <p>placeholder</p>
    if node.tag != "p":
        return False
    if len(node) == 0 and HTML_PLACEHOLDER_RE.fullmatch((node.text or "").strip()):
        return False
    return True


class SubjectExtractor:
    """Single-pass state machine picking the title and summary out of a tree.

    ``feed`` is called for every walk event and answers whether that node is
    suppressed from the rendered body. The first top-level ``h1`` becomes the
    subject only when it is the first element; the first paragraph after it
    (or the first element, when there is no heading) becomes the summary.
    Anything else ends extraction for good.
    """

    def __init__(self, root: etree.Element, stash: Optional[list] = None):
        self.root = root
        self.stash = stash or []
        self.phase = Phase.AWAITING_TITLE
        self.container: Optional[etree.Element] = None
        self.subject = ""
        self.summary = ""
        self._buffer: list[str] = []

    def feed(self, node: Node, entering: bool) -> bool:
        if self.phase is Phase.DONE:
            return False

        if self.container is None:
            if not entering or isinstance(node, str) or node is self.root:
                return False
            if self.phase is Phase.AWAITING_TITLE:
                if node.tag == "h1":
                    self.container = node
                    return True
                self.phase = Phase.AWAITING_SUMMARY
            if is_paragraph(node):
                self.container = node
                return True
            self.phase = Phase.DONE
            return False

        if node is self.container and not entering:
            text = HTML_PLACEHOLDER_RE.sub(self._unstash, "".join(self._buffer)).strip()
            self._buffer = []
            self.container = None
            if self.phase is Phase.AWAITING_TITLE:
                self.subject = text
                self.phase = Phase.AWAITING_SUMMARY
            else:
                self.summary = text
                self.phase = Phase.DONE
            return True

        if isinstance(node, str):
            self._buffer.append(node)
        return self.phase is Phase.AWAITING_TITLE

    def _unstash(self, match: re.Match) -> str:
        index = int(match.group(1))
        if index >= len(self.stash):
            return ""
        raw = self.stash[index]
        if isinstance(raw, str):
            return html.unescape(TAG_RE.sub("", raw))
        return "".join(raw.itertext())


class ExtractTreeprocessor(Treeprocessor):
    def run(self, root: etree.Element) -> None:
        extractor = SubjectExtractor(root, self.md.htmlStash.rawHtmlBlocks)
        dropped = []
        for node, entering in walk(root):
            suppressed = extractor.feed(node, entering)
            if suppressed and not entering and isinstance(node, etree.Element):
                dropped.append(node)

        top_level = {id(child) for child in root}
        for node in dropped:
            if id(node) in top_level:
                root.remove(node)

        self.md.subject = extractor.subject
        self.md.summary = extractor.summary


class ExtractExtension(Extension):
    def extendMarkdown(self, md: markdown.Markdown) -> None:
        md.registerExtension(self)
        self.md = md
        self.reset()
        # after inline processing, prettify and unescape
        md.treeprocessors.register(ExtractTreeprocessor(md), "mixdown_extract", -5)

    def reset(self) -> None:
        self.md.subject = ""
        self.md.summary = ""


def create_markdown() -> markdown.Markdown:
    return markdown.Markdown(
        extensions=[*MARKDOWN_EXTENSIONS, ExtractExtension()],
        extension_configs=MARKDOWN_EXTENSION_CONFIGS,
    )


def extract(text: str, source: str = "<string>", md: Optional[markdown.Markdown] = None) -> Extraction:
    if md is None:
        md = create_markdown()
    md.reset()
    try:
        body = md.convert(text.strip())
    except Exception as exc:
        raise ParseError(f"failed to parse {source!r}: {exc}") from exc
    result = Extraction(subject=md.subject, summary=md.summary, body=body)
    md.reset()
    logger.debug("%s: subject=%r summary=%r", source, result.subject, result.summary)
    return result
