from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable, Iterator, Optional

from .utils import escape_path, join_url

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger(__name__)

PAGE_ARCHIVE = "archive"
PAGE_TAG = "tag"

PathFor = Callable[[int], tuple[str, str]]


@dataclass(frozen=True)
class SiteContext:
    """Sitewide values shared read-only by every rendered page."""

    readme: Optional["Document"] = None
    hashtags: tuple[str, ...] = ()


@dataclass(eq=False)
class Page:
    chain: "PageChain" = field(repr=False)
    index: int
    pathname: str
    href: str
    docs: list["Document"] = field(default_factory=list, repr=False)
    first: Optional["Document"] = field(default=None, repr=False)
    last: Optional["Document"] = field(default=None, repr=False)

    @property
    def kind(self) -> str:
        return self.chain.kind

    @property
    def subject(self) -> str:
        return self.chain.subject

    @property
    def page(self) -> int:
        return self.index + 1

    @property
    def npage(self) -> int:
        return self.chain.npage

    @property
    def newer(self) -> Optional["Page"]:
        if self.index == 0:
            return None
        return self.chain.pages[self.index - 1]

    @property
    def older(self) -> Optional["Page"]:
        if self.index + 1 >= len(self.chain.pages):
            return None
        return self.chain.pages[self.index + 1]

    @property
    def readme(self) -> Optional["Document"]:
        return self.chain.context.readme

    @property
    def hashtags(self) -> tuple[str, ...]:
        return self.chain.context.hashtags


class PageChain:
    """Fixed-capacity pages linked from the head (page 1) towards older pages.

    Pages live in ``pages`` in creation order and refer to each other by
    position, so the page count every page reports is always the length of
    the finished chain.
    """

    def __init__(self, kind: str, capacity: int, path_for: PathFor, subject: str = ""):
        if capacity < 1:
            raise ValueError(f"page capacity must be greater than 0, got {capacity}")
        self.kind = kind
        self.subject = subject
        self.capacity = capacity
        self.path_for = path_for
        self.context = SiteContext()
        self.pages: list[Page] = []
        self._open_page()

    def _open_page(self) -> Page:
        index = len(self.pages)
        pathname, href = self.path_for(index + 1)
        page = Page(chain=self, index=index, pathname=pathname, href=href)
        self.pages.append(page)
        return page

    @property
    def head(self) -> Page:
        return self.pages[0]

    @property
    def tail(self) -> Page:
        return self.pages[-1]

    @property
    def npage(self) -> int:
        return len(self.pages)

    def append(self, doc: "Document") -> Page:
        page = self.tail
        if len(page.docs) == self.capacity:
            page = self._open_page()
        page.docs.append(doc)
        return page

    def finalize(self, context: SiteContext) -> None:
        if not self.head.docs:
            raise ValueError(f"{self.kind} chain {self.subject!r} has no documents")
        self.context = context
        if self.kind == PAGE_ARCHIVE:
            for page in self.pages:
                page.first, page.last = page.docs[0], page.docs[-1]

    def __iter__(self) -> Iterator[Page]:
        page: Optional[Page] = self.head
        while page is not None:
            yield page
            page = page.older


def archive_path_for(extname: str, baseurl: str = "/") -> PathFor:
    def path_for(number: int) -> tuple[str, str]:
        filename = f"index.{extname}" if number == 1 else f"{number}.{extname}"
        pathname = f"archive/{filename}"
        return pathname, join_url(baseurl, pathname)

    return path_for


def tag_dirname(tag: str) -> str:
    """Directory of a tag under ``t/``, with dot segments made literal."""
    segments = tag.split("/")
    return "/".join(seg.replace(".", "%2E") if seg in (".", "..") else seg for seg in segments)


def tag_urlpath(tag: str) -> str:
    return "/".join(escape_path(seg) for seg in tag_dirname(tag).split("/"))


def tag_path_for(tag: str, extname: str, baseurl: str = "/") -> PathFor:
    dirname = tag_dirname(tag)
    urlpath = tag_urlpath(tag)

    def path_for(number: int) -> tuple[str, str]:
        filename = f"index.{extname}" if number == 1 else f"{number}.{extname}"
        pathname = f"t/{dirname}/{filename}"
        return pathname, join_url(baseurl, f"t/{urlpath}/{filename}")

    return path_for


def tag_href(tag: str, baseurl: str = "/") -> str:
    return join_url(baseurl, f"t/{tag_urlpath(tag)}/")


def build_chain(chain: PageChain, docs: Iterable["Document"]) -> PageChain:
    for doc in docs:
        chain.append(doc)
    if not chain.head.docs:
        raise ValueError(f"cannot paginate an empty {chain.kind} list")
    return chain


def archive_chain(docs: Iterable["Document"], capacity: int, extname: str, baseurl: str = "/") -> PageChain:
    chain = PageChain(PAGE_ARCHIVE, capacity, archive_path_for(extname, baseurl))
    build_chain(chain, docs)
    logger.debug("archive: %d pages", chain.npage)
    return chain


def tag_chain(tag: str, capacity: int, extname: str, baseurl: str = "/") -> PageChain:
    return PageChain(PAGE_TAG, capacity, tag_path_for(tag, extname, baseurl), subject=f"#{tag}")
