from __future__ import annotations

import datetime as dt
import html
import logging
from pathlib import Path
from typing import Optional

from .document import Document
from .paginator import PAGE_ARCHIVE, PAGE_TAG, Page, PageChain, SiteContext, tag_href
from .render import PYGMENTS_CSS, Theme, copy_file, write_text
from .tags import TagIndex
from .utils import join_url

logger = logging.getLogger(__name__)

PAGE_HOME = "home"
PAGE_ARTICLE = "article"
DATE_FMT = "%Y-%m-%d"


def display_title(doc: Document) -> str:
    return doc.title or doc.name


def format_date(value: dt.datetime) -> str:
    return value.strftime(DATE_FMT)


def build_hashtag_list(hashtags: tuple[str, ...], baseurl: str) -> str:
    items = [
        f'<li><a href="{html.escape(tag_href(tag, baseurl))}">#{html.escape(tag)}</a></li>'
        for tag in hashtags
    ]
    return f'<ul class="hashtags">{"".join(items)}</ul>' if items else ""


def build_readme_link(readme: Optional[Document]) -> str:
    if readme is None:
        return ""
    return f'<a class="readme" href="{html.escape(readme.href)}">{html.escape(display_title(readme))}</a>'


def build_doc_list(docs: list[Document]) -> str:
    items = []
    for doc in docs:
        items.append(
            '<li class="doc">'
            f'<time datetime="{doc.cdate}">{format_date(doc.created)}</time>'
            f'<a class="doc-title" href="{html.escape(doc.href)}">{html.escape(display_title(doc))}</a>'
            f'<p class="doc-summary">{doc.summary}</p>'
            "</li>"
        )
    return f'<ul class="docs">{"".join(items)}</ul>'


def build_link(css_class: str, href: str, label: str) -> str:
    return f'<a class="{css_class}" href="{html.escape(href)}">{html.escape(label)}</a>'


def build_pagination(page: Page) -> str:
    if page.npage <= 1:
        return ""
    items = []
    if page.newer is not None:
        items.append(build_link("page-link newer", page.newer.href, "Newer"))
    items.append(f'<span class="page-number">page {page.page} of {page.npage}</span>')
    if page.older is not None:
        items.append(build_link("page-link older", page.older.href, "Older"))
    return f'<nav class="pagination">{"".join(items)}</nav>'


def build_article_nav(doc: Document) -> str:
    items = []
    if doc.newer is not None:
        items.append(build_link("page-link newer", doc.newer.href, display_title(doc.newer)))
    if doc.older is not None:
        items.append(build_link("page-link older", doc.older.href, display_title(doc.older)))
    return f'<nav class="pagination">{"".join(items)}</nav>' if items else ""


def common_context(pagetype: str, context: SiteContext, baseurl: str) -> dict[str, str]:
    return {
        "pagetype": pagetype,
        "home": html.escape(join_url(baseurl, "")),
        "stylesheet": html.escape(join_url(baseurl, "css/style.css")),
        "pygments": html.escape(join_url(baseurl, PYGMENTS_CSS.as_posix())),
        "hashtags": build_hashtag_list(context.hashtags, baseurl),
        "readme": build_readme_link(context.readme),
        "year": str(dt.datetime.now().year),
    }


def page_context(page: Page, baseurl: str) -> dict[str, str]:
    values = common_context(page.kind, page.chain.context, baseurl)
    date_range = ""
    if page.first is not None and page.last is not None:
        # documents run newest first
        date_range = f"{format_date(page.last.created)} - {format_date(page.first.created)}"
    values.update(
        {
            "title": html.escape(page.subject or "Archive"),
            "subject": html.escape(page.subject),
            "page": str(page.page),
            "npage": str(page.npage),
            "range": date_range,
            "pagination": build_pagination(page),
            "docs": build_doc_list(page.docs),
        }
    )
    return values


def render_page(theme: Theme, outdir: Path, template: str, pathname: str, label: str, **context: str) -> None:
    destination = outdir / pathname
    logger.info("%r -> %r", label, str(destination))
    write_text(destination, theme.execute(template, **context))


def render_chain(theme: Theme, outdir: Path, chain: PageChain, label: str, baseurl: str) -> None:
    template = PAGE_TAG if chain.kind == PAGE_TAG else PAGE_ARCHIVE
    for page in chain:
        render_page(theme, outdir, template, page.pathname, label or page.pathname, **page_context(page, baseurl))


def render_tags(theme: Theme, outdir: Path, index: TagIndex, baseurl: str) -> None:
    for tag, chain in index.chains.items():
        render_chain(theme, outdir, chain, tag, baseurl)


def render_articles(
    theme: Theme, outdir: Path, docs: list[Document], context: SiteContext, baseurl: str
) -> None:
    for doc in docs:
        doc.load()
        values = common_context(PAGE_ARTICLE, context, baseurl)
        values.update(
            {
                "title": html.escape(display_title(doc)),
                "summary": doc.summary,
                "author": html.escape(doc.author),
                "cdate": doc.cdate,
                "created": format_date(doc.created),
                "modified": format_date(doc.modified),
                "commit_subject": html.escape(doc.commit_subject),
                "commit_message": html.escape(doc.commit_message),
                "source": html.escape(doc.source),
                "pagination": build_article_nav(doc),
                "body": doc.body,
            }
        )
        render_page(theme, outdir, PAGE_ARTICLE, doc.pathname, doc.source, **values)
        doc.unload()


def render_archives(theme: Theme, outdir: Path, chain: Optional[PageChain], baseurl: str) -> None:
    if chain is None:
        return
    render_chain(theme, outdir, chain, "", baseurl)


def render_home(
    theme: Theme, outdir: Path, docs: list[Document], context: SiteContext, extname: str, baseurl: str
) -> None:
    values = common_context(PAGE_HOME, context, baseurl)
    values.update(
        {
            "title": "",
            "archive": html.escape(join_url(baseurl, f"archive/index.{extname}")),
            "docs": build_doc_list(docs),
        }
    )
    render_page(theme, outdir, PAGE_HOME, f"index.{extname}", "index", **values)


def render_resources(outdir: Path, resources: list[Document], root: Path) -> None:
    for rsrc in resources:
        copy_file(root / rsrc.source, outdir / rsrc.pathname)
        rsrc.unload()
