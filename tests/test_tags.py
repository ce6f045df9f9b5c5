from __future__ import annotations

from mixdown.document import Document
from mixdown.tags import TagIndex, find_hashtags, link_hashtags


def make_doc(source: str, summary: str, ctime: int = 0) -> Document:
    doc = Document(source=source, ctime=ctime)
    doc.summary = summary
    doc.hashtags = find_hashtags(summary)
    return doc


def test_find_hashtags_dedupes_in_first_seen_order() -> None:
    assert find_hashtags("Released #v1 today, see #v1 notes") == ["#v1"]
    assert find_hashtags("#b then #a then #b") == ["#b", "#a"]


def test_find_hashtags_requires_a_boundary() -> None:
    assert find_hashtags("issue#12 is fixed") == []
    assert find_hashtags("#start of text") == ["#start"]
    assert find_hashtags("#") == []


def test_find_hashtags_stops_at_web_whitespace() -> None:
    assert find_hashtags("#tag\u3000next") == ["#tag"]
    assert find_hashtags("#one #two") == ["#one", "#two"]


def test_only_first_occurrence_is_linked() -> None:
    summary = "Released #v1 today, see #v1 notes"

    linked = link_hashtags(summary, find_hashtags(summary))

    assert linked == 'Released <a href="/t/v1/">#v1</a> today, see #v1 notes'


def test_link_hashtags_escapes_text() -> None:
    linked = link_hashtags("a < b #x&y", ["#x&y"], baseurl="/blog/")

    assert linked == 'a &lt; b <a href="/blog/t/x&amp;y/">#x&amp;y</a>'


def test_prefix_tag_does_not_steal_longer_token() -> None:
    summary = "#v10 before #v1"

    linked = link_hashtags(summary, find_hashtags(summary))

    assert linked == '<a href="/t/v10/">#v10</a> before <a href="/t/v1/">#v1</a>'


def test_tag_index_groups_documents() -> None:
    docs = [
        make_doc("c.md", "#a and #a again", ctime=3),
        make_doc("README.md", "about #b", ctime=2),
        make_doc("a.md", "#b #C #a", ctime=1),
    ]

    index = TagIndex.build(docs, 10, "html")

    assert index.hashtags == ["C", "a", "b"]
    assert list(index.chains) == ["a", "b", "C"]
    assert index.chains["a"].head.docs == [docs[0], docs[2]]
    assert index.chains["b"].head.docs == [docs[1], docs[2]]
    assert index.readme is docs[1]
    assert index.chains["C"].head.hashtags == ("C", "a", "b")
    assert index.chains["C"].head.readme is docs[1]
    assert docs[0].summary == '<a href="/t/a/">#a</a> and #a again'


def test_tag_index_paginates_each_tag() -> None:
    docs = [make_doc(f"{i}.md", "#x", ctime=i) for i in range(5)]

    index = TagIndex.build(docs, 2, "html")
    chain = index.chains["x"]

    assert chain.npage == 3
    assert [page.pathname for page in chain] == ["t/x/index.html", "t/x/2.html", "t/x/3.html"]
    assert chain.tail.docs == [docs[4]]


def test_tag_index_without_tags() -> None:
    index = TagIndex.build([make_doc("a.md", "plain")], 2, "html")

    assert index.chains == {}
    assert index.hashtags == []
    assert index.readme is None


def test_hashtags_after_non_ascii_letters() -> None:
    assert find_hashtags("リリース#v1 です") == ["#v1"]
    assert find_hashtags("café#menu") == ["#menu"]
    assert find_hashtags("issue#12") == []
