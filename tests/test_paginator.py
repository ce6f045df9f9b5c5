from __future__ import annotations

import math
import posixpath

import pytest

from mixdown.document import Document
from mixdown.paginator import (
    PAGE_TAG,
    PageChain,
    SiteContext,
    archive_chain,
    build_chain,
    tag_chain,
    tag_href,
)


def make_docs(count: int) -> list[Document]:
    return [Document(source=f"doc{i}.md", ctime=1546992000 + i) for i in range(1, count + 1)]


def test_five_documents_with_capacity_two_make_three_pages() -> None:
    docs = make_docs(5)

    chain = archive_chain(docs, 2, "html")
    pages = list(chain)

    assert [page.page for page in pages] == [1, 2, 3]
    assert [page.npage for page in pages] == [3, 3, 3]
    assert pages[0].docs == docs[0:2]
    assert pages[1].docs == docs[2:4]
    assert pages[2].docs == docs[4:5]
    assert [page.pathname for page in pages] == [
        "archive/index.html",
        "archive/2.html",
        "archive/3.html",
    ]


def test_pages_are_linked_both_ways() -> None:
    chain = archive_chain(make_docs(5), 2, "html")
    first, second, third = chain.pages

    assert first.newer is None
    assert first.older is second
    assert second.newer is first
    assert second.older is third
    assert third.newer is second
    assert third.older is None


@pytest.mark.parametrize("count, capacity", [(1, 1), (3, 5), (4, 2), (7, 3), (40, 40), (41, 40)])
def test_page_count_and_sizes(count: int, capacity: int) -> None:
    chain = archive_chain(make_docs(count), capacity, "html")
    pages = list(chain)

    assert len(pages) == math.ceil(count / capacity)
    assert all(len(page.docs) == capacity for page in pages[:-1])
    assert len(pages[-1].docs) == (count % capacity or capacity)
    assert all(page.npage == len(pages) for page in pages)


def test_exact_multiple_has_no_trailing_empty_page() -> None:
    chain = archive_chain(make_docs(4), 2, "html")

    assert chain.npage == 2
    assert chain.tail.docs
    assert chain.tail.older is None


def test_fewer_documents_than_capacity_make_one_page() -> None:
    chain = archive_chain(make_docs(3), 10, "html")

    assert chain.npage == 1
    assert chain.head.older is None
    assert chain.head.newer is None


def test_early_pages_see_the_final_page_count() -> None:
    chain = tag_chain("go", 1, "html")
    head = chain.append(make_docs(1)[0])

    assert head.npage == 1
    for doc in make_docs(3):
        chain.append(doc)
    assert head.npage == 4


def test_empty_chain_is_rejected() -> None:
    with pytest.raises(ValueError):
        archive_chain([], 2, "html")


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        archive_chain(make_docs(1), 0, "html")


def test_finalize_sets_first_last_and_context() -> None:
    docs = make_docs(3)
    readme = Document(source="README.md")
    chain = archive_chain(docs, 2, "html")

    chain.finalize(SiteContext(readme=readme, hashtags=("a", "b")))

    assert (chain.pages[0].first, chain.pages[0].last) == (docs[0], docs[1])
    assert (chain.pages[1].first, chain.pages[1].last) == (docs[2], docs[2])
    assert all(page.readme is readme for page in chain)
    assert all(page.hashtags == ("a", "b") for page in chain)


def test_tag_chain_paths_and_subject() -> None:
    chain = build_chain(tag_chain("日本", 1, "htm", "/blog/"), make_docs(2))
    chain.finalize(SiteContext())

    assert chain.kind == PAGE_TAG
    assert chain.head.subject == "#日本"
    assert chain.head.pathname == "t/日本/index.htm"
    assert chain.head.href == "/blog/t/%E6%97%A5%E6%9C%AC/index.htm"
    assert chain.tail.pathname == "t/日本/2.htm"
    assert chain.head.first is None


def test_finalize_rejects_empty_chain() -> None:
    chain = PageChain(PAGE_TAG, 2, lambda number: (f"{number}.html", f"/{number}.html"))

    with pytest.raises(ValueError):
        chain.finalize(SiteContext())


def test_dot_segments_in_tags_stay_under_tag_dir() -> None:
    chain = build_chain(tag_chain("../../x", 1, "html"), make_docs(1))

    assert chain.head.pathname == "t/%2E%2E/%2E%2E/x/index.html"
    assert posixpath.normpath(chain.head.pathname).startswith("t/")
    assert chain.head.href == "/t/%252E%252E/%252E%252E/x/index.html"
    assert tag_href("../x") == "/t/%252E%252E/x/"
    assert tag_href("a/b") == "/t/a/b/"
