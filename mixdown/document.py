from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from .errors import ParseError, SourceError
from .extractor import extract
from .tags import find_hashtags
from .utils import basename, epoch_to_datetime, epoch_to_iso8601, escape_path, join_url

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


def is_markdown(source: str) -> bool:
    return source.endswith(MARKDOWN_SUFFIX)


@dataclass(eq=False)
class Document:
    """One tracked file.

    Markdown sources are content documents: they are extracted, linked into
    the chronological chain and may carry hashtags. Everything else is an
    opaque resource that is copied to the output unchanged.
    """

    source: str
    author: str = ""
    ctime: int = 0
    mtime: int = 0
    commit_subject: str = ""
    commit_message: str = ""
    root: Path = field(default_factory=Path, repr=False)
    name: str = field(init=False)
    is_markdown: bool = field(init=False)
    cdate: str = field(init=False)
    pathname: str = field(init=False)
    href: str = field(init=False)
    title: str = ""
    summary: str = ""
    hashtags: list[str] = field(default_factory=list)
    body: str = field(default="", repr=False)
    newer: Optional["Document"] = field(default=None, repr=False)
    older: Optional["Document"] = field(default=None, repr=False)
    extracted: bool = field(default=False, repr=False)

    def __post_init__(self) -> None:
        self.name = basename(self.source)
        self.is_markdown = is_markdown(self.source)
        self.cdate = epoch_to_iso8601(self.ctime)
        self.pathname = self.source
        self.href = self.source

    @property
    def created(self) -> dt.datetime:
        return epoch_to_datetime(self.ctime)

    @property
    def modified(self) -> dt.datetime:
        return epoch_to_datetime(self.mtime)

    @property
    def tags(self) -> list[str]:
        return [hashtag[1:] for hashtag in self.hashtags]

    def assign_path(self, extname: str, use_epochname: bool, baseurl: str = "/") -> None:
        if not self.is_markdown:
            self.pathname = self.source
            self.href = join_url(baseurl, "/".join(escape_path(part) for part in self.source.split("/")))
            return
        year = self.cdate[:4]
        if use_epochname:
            self.pathname = f"{year}/{self.ctime}.{extname}"
            self.href = join_url(baseurl, self.pathname)
        else:
            self.pathname = f"{year}/{self.name}.{extname}"
            self.href = join_url(baseurl, f"{year}/{escape_path(self.name)}.{extname}")

    def load(self) -> None:
        """Render the markdown source into ``body``.

        Title, summary and hashtags are taken from the first load only; later
        loads refresh the body and leave an already rewritten summary alone.
        """
        if not self.is_markdown:
            return
        path = self.root / self.source
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise SourceError(f"failed to read {self.source!r}: {exc}") from exc
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"failed to decode {self.source!r}: {exc}") from exc

        logger.debug("load %r", self.source)
        result = extract(text, source=self.source)
        if not self.extracted:
            self.title = result.subject
            self.summary = result.summary
            self.hashtags = find_hashtags(result.summary)
            self.extracted = True
        self.body = result.body

    def unload(self) -> None:
        self.body = ""


def link_documents(documents: Iterable[Document]) -> list[Document]:
    """Sort content documents newest first and chain them newer/older."""
    docs = sorted(documents, key=lambda doc: doc.ctime, reverse=True)
    for doc in docs:
        doc.newer = None
        doc.older = None
    for newer, older in zip(docs, docs[1:]):
        newer.older = older
        older.newer = newer
    return docs
