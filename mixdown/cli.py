from __future__ import annotations

import argparse
import logging
import sys
import tempfile
import time
from pathlib import Path
from typing import Optional, Sequence

from .config import CONFIG_PATH, Settings, load_config
from .errors import MixdownError
from .pages import render_archives, render_articles, render_home, render_resources, render_tags
from .paginator import archive_chain
from .render import Theme
from .tags import TagIndex
from .tracker import get_tracked_files
from .utils import clean_output_dir, parse_bool, parse_int

logger = logging.getLogger(__name__)

RULE = "*" * 80


def build_site(settings: Settings, project_root: Path) -> Path:
    settings.validate()
    if not settings.outdir:
        tmpdir = tempfile.mkdtemp(prefix="mixdown-", dir=project_root)
        settings.outdir = Path(tmpdir).relative_to(project_root).as_posix()

    logger.info("mixdown with following options;")
    logger.info("  -outdir        : %r", settings.outdir)
    logger.info("  -use-epochname : %s", settings.use_epochname)
    logger.info("  -extname       : %r", settings.extname)
    logger.info("  -narchive      : %d", settings.narchive)
    logger.info("  -baseurl       : %r", settings.baseurl)

    outdir = project_root / settings.outdir
    logger.info(RULE)
    logger.info("CREATE OUTPUT DIRECTORY %r", str(outdir))
    clean_output_dir(outdir, project_root)
    outdir.mkdir(parents=True, exist_ok=True)

    logger.info(RULE)
    logger.info("LOAD THEME FILES")
    theme = Theme.load(project_root / settings.theme_dir, settings.pygments_style)

    logger.info(RULE)
    logger.info("LOAD TRACKED FILES")
    outprefix = Path(settings.outdir).as_posix().strip("/") + "/"
    docs, resources = get_tracked_files(
        project_root,
        settings.extname,
        settings.use_epochname,
        settings.baseurl,
        exclude=(outprefix,),
    )

    index = TagIndex.build(docs, settings.narchive, settings.extname, settings.baseurl)
    context = index.context
    archive = None
    if docs:
        archive = archive_chain(docs, settings.narchive, settings.extname, settings.baseurl)
        archive.finalize(context)

    logger.info(RULE)
    logger.info("RENDER 'Tag'")
    render_tags(theme, outdir, index, settings.baseurl)
    logger.info(RULE)
    logger.info("RENDER 'Article'")
    render_articles(theme, outdir, docs, context, settings.baseurl)
    logger.info(RULE)
    logger.info("RENDER 'Archive'")
    render_archives(theme, outdir, archive, settings.baseurl)
    logger.info(RULE)
    logger.info("RENDER 'Home'")
    render_home(theme, outdir, docs, context, settings.extname, settings.baseurl)
    logger.info(RULE)
    logger.info("RENDER 'Resources'")
    render_resources(outdir, resources, project_root)

    logger.info(RULE)
    logger.info("EXPORT ASSETS DIRECTORIES")
    theme.export_assets(outdir)
    return outdir


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default=str(CONFIG_PATH),
        help="Path to config file (JSON/TOML/YAML).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    config = load_config(Path(pre_args.config))
    defaults = Settings()

    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    def cfg_int(key: str, default: int) -> int:
        return parse_int(cfg_value(key, default), default)

    parser = argparse.ArgumentParser(description="Generate a static site from the markdown files tracked by git.")
    parser.add_argument("--config", default=pre_args.config, help="Path to config file (JSON/TOML/YAML).")
    parser.add_argument(
        "--outdir",
        default=cfg_str("outdir", defaults.outdir),
        help="Pathname of output directory. If empty, a temporary name is generated.",
    )
    parser.add_argument(
        "--use-epochname",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("use_epochname", defaults.use_epochname),
        help="Use the epoch time of file creation as the output filename.",
    )
    parser.add_argument(
        "--extname",
        default=cfg_str("extname", defaults.extname),
        help="Extension name of the output files.",
    )
    parser.add_argument(
        "--narchive",
        default=cfg_int("narchive", defaults.narchive),
        type=int,
        help="Number of articles per archive and tag page.",
    )
    parser.add_argument(
        "--baseurl",
        default=cfg_str("baseurl", defaults.baseurl),
        help="URL prefix of every generated link.",
    )
    parser.add_argument(
        "--theme",
        default=cfg_str("theme", defaults.theme_dir),
        help="Theme directory.",
    )
    parser.add_argument(
        "--pygments-style",
        default=cfg_str("pygments_style", defaults.pygments_style),
        help="Pygments style used for highlighted code blocks.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    return Settings(
        outdir=args.outdir,
        use_epochname=args.use_epochname,
        extname=args.extname,
        narchive=args.narchive,
        baseurl=args.baseurl,
        theme_dir=args.theme,
        pygments_style=args.pygments_style,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        args = parse_args(argv)
    except MixdownError as exc:
        print(f"failed to load config: {exc}", file=sys.stderr)
        sys.exit(1)
    _configure_logging(args.verbose)
    settings = settings_from_args(args)
    start = time.perf_counter()
    try:
        outdir = build_site(settings, Path.cwd())
    except MixdownError as exc:
        print(f"mixdown: {exc}", file=sys.stderr)
        sys.exit(1)
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Site generated in: {outdir}")
