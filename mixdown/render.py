from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from pygments.formatters import HtmlFormatter
from pygments.util import ClassNotFound

from .errors import RenderError, TemplateNotFoundError

logger = logging.getLogger(__name__)

LAYOUT_NAME = "base.html"
TEMPLATE_SUFFIX = ".html"
DEFAULT_THEME_DIR = Path(__file__).parent / "theme"
PYGMENTS_CSS = Path("css") / "pygments.css"
LATE_KEYS = ("docs", "readme", "body", "content")


def render_template(template: str, **context: str) -> str:
    output = template
    for key, value in context.items():
        if key in LATE_KEYS:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in LATE_KEYS:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def read_template(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise RenderError(f"failed to write {str(path)!r}: {exc}") from exc


def copy_file(src: Path, dst: Path) -> bool:
    if src.name.startswith("."):
        logger.info("skip dotfile %r", str(src))
        return False
    logger.info("copy file %r to %r", str(src), str(dst))
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(src, dst)
    except OSError as exc:
        raise RenderError(f"failed to copy {str(src)!r} to {str(dst)!r}: {exc}") from exc
    return True


def copy_dir(src: Path, dst: Path) -> None:
    if src.name.startswith("."):
        logger.info("skip dotfile %r", str(src))
        return
    logger.info("copy dir %r to %r", str(src), str(dst))
    try:
        shutil.copytree(src, dst, ignore=shutil.ignore_patterns(".*"), dirs_exist_ok=True)
    except (OSError, shutil.Error) as exc:
        raise RenderError(f"failed to copy {str(src)!r} to {str(dst)!r}: {exc}") from exc


class Theme:
    """Templates and asset directories of a theme directory.

    ``base.html`` is the layout every page is wrapped in through its
    ``{{content}}`` placeholder; every other ``*.html`` file is a page
    template named by its stem. Subdirectories are exported as assets.
    """

    def __init__(self, theme_dir: Path, pygments_style: str = "default"):
        if not theme_dir.is_dir():
            raise RenderError(f"theme {str(theme_dir)!r} is not found")
        self.theme_dir = theme_dir
        self.pygments_style = pygments_style
        self.layout: Optional[str] = None
        self.templates: dict[str, str] = {}
        self.assets: dict[str, Path] = {}
        for item in sorted(theme_dir.iterdir()):
            if item.name.startswith("."):
                continue
            if item.is_dir():
                logger.info("asset %r", item.name)
                self.assets[item.name] = item
            elif item.name == LAYOUT_NAME:
                self.layout = read_template(item)
            elif item.suffix == TEMPLATE_SUFFIX:
                logger.info("template %r - %r", item.stem, item.name)
                self.templates[item.stem] = read_template(item)

    @classmethod
    def load(cls, theme_dir: Path, pygments_style: str = "default") -> "Theme":
        if not theme_dir.exists():
            logger.warning("theme %r not found, using the bundled theme", str(theme_dir))
            theme_dir = DEFAULT_THEME_DIR
        return cls(theme_dir, pygments_style)

    def execute(self, name: str, **context: str) -> str:
        template = self.templates.get(name)
        if template is None:
            raise TemplateNotFoundError(name)
        content = render_template(template, **context)
        if self.layout is None:
            return content
        return render_template(self.layout, **{**context, "content": content})

    def stylesheet(self) -> str:
        try:
            formatter = HtmlFormatter(style=self.pygments_style)
        except ClassNotFound as exc:
            raise RenderError(f"unknown pygments style {self.pygments_style!r}") from exc
        return formatter.get_style_defs(".codehilite")

    def export_assets(self, outdir: Path) -> None:
        for name, srcdir in self.assets.items():
            dstdir = outdir / name
            logger.info("export %r %r -> %r", name, str(srcdir), str(dstdir))
            copy_dir(srcdir, dstdir)
        write_text(outdir / PYGMENTS_CSS, self.stylesheet())
