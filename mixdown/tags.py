from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional

from .paginator import PageChain, SiteContext, tag_chain, tag_href

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger(__name__)

# whitespace as defined for JavaScript's \s; word boundaries are ASCII only
HASHTAG_RE = re.compile(
    r"\B#[^ \f\n\r\t\v\u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff]+",
    re.ASCII,
)
README_PREFIX = "README."


def find_hashtags(text: str) -> list[str]:
    """Distinct hashtag tokens of ``text`` in order of first appearance."""
    hashtags: list[str] = []
    for match in HASHTAG_RE.finditer(text):
        token = match.group(0)
        if token not in hashtags:
            hashtags.append(token)
    return hashtags


def link_hashtags(summary: str, hashtags: Iterable[str], baseurl: str = "/") -> str:
    """Return ``summary`` as escaped markup with hashtags turned into links.

    Only the first occurrence of each token is linked; repeats stay literal.
    """
    pending = set(hashtags)
    parts = []
    pos = 0
    for match in HASHTAG_RE.finditer(summary):
        token = match.group(0)
        if token not in pending:
            continue
        pending.discard(token)
        parts.append(html.escape(summary[pos : match.start()], quote=False))
        href = html.escape(tag_href(token[1:], baseurl))
        parts.append(f'<a href="{href}">{html.escape(token, quote=False)}</a>')
        pos = match.end()
    parts.append(html.escape(summary[pos:], quote=False))
    return "".join(parts)


@dataclass
class TagIndex:
    chains: dict[str, PageChain] = field(default_factory=dict)
    hashtags: list[str] = field(default_factory=list)
    readme: Optional["Document"] = None

    @property
    def context(self) -> SiteContext:
        return SiteContext(readme=self.readme, hashtags=tuple(self.hashtags))

    @classmethod
    def build(
        cls, documents: Iterable["Document"], capacity: int, extname: str, baseurl: str = "/"
    ) -> "TagIndex":
        index = cls()
        for doc in documents:
            if doc.source.startswith(README_PREFIX):
                index.readme = doc

            doc.summary = link_hashtags(doc.summary, doc.hashtags, baseurl)
            for tag in doc.tags:
                chain = index.chains.get(tag)
                if chain is None:
                    chain = tag_chain(tag, capacity, extname, baseurl)
                    index.chains[tag] = chain
                    index.hashtags.append(tag)
                chain.append(doc)

        index.hashtags.sort()
        context = index.context
        for chain in index.chains.values():
            chain.finalize(context)
        logger.info("found %d hashtags", len(index.hashtags))
        return index
