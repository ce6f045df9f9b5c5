from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .document import Document, link_documents
from .errors import SourceError

logger = logging.getLogger(__name__)

# %ae author email, %ct committer date (unix time), %s subject, %b body
LOG_FORMAT = "--format=%ae%x00%ct%x00%s%x00%b%x00"


@dataclass(frozen=True)
class Commit:
    author: str
    time: int
    subject: str
    body: str


def run_git(args: list[str], cwd: Path) -> str:
    command = ["git", *args]
    try:
        proc = subprocess.run(command, cwd=cwd, capture_output=True, check=True)
    except FileNotFoundError as exc:
        raise SourceError(f"git executable not found: {exc}") from exc
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.decode("utf-8", "replace").strip()
        raise SourceError(f"error {' '.join(command)!r}: {stderr or exc}") from exc
    return proc.stdout.decode("utf-8")


def is_skipped(source: str) -> bool:
    return source == "LICENSE" or source.startswith("LICENSE.") or source.startswith(".")


def list_tracked_files(cwd: Path) -> list[str]:
    out = run_git(["ls-files", "-z"], cwd)
    return [src for src in out.strip().split("\x00") if src and not is_skipped(src)]


def parse_log(source: str, out: str) -> list[Commit]:
    """Parse ``git log`` output, newest commit first."""
    commits = []
    for record in out.strip().split("\x00\n"):
        # drop the record terminator only, empty trailing fields stay
        if record.endswith("\x00"):
            record = record[:-1]
        if not record:
            continue
        fields = record.split("\x00")
        if len(fields) < 3:
            raise SourceError(f"malformed commit log for {source!r}: {record!r}")
        author, epoch, subject = fields[:3]
        body = fields[3] if len(fields) > 3 else ""
        try:
            time = int(epoch.strip())
        except ValueError as exc:
            raise SourceError(f"invalid commit time {epoch!r} for {source!r}") from exc
        commits.append(
            Commit(
                # without domain name
                author=author.strip().split("@", 1)[0],
                time=time,
                subject=subject.strip(),
                body=body.strip(),
            )
        )
    if not commits:
        raise SourceError(f"no commit history for {source!r}")
    return commits


def read_history(source: str, cwd: Path) -> list[Commit]:
    return parse_log(source, run_git(["log", LOG_FORMAT, "--", source], cwd))


def get_tracked_files(
    cwd: Path, extname: str, use_epochname: bool, baseurl: str = "/", exclude: tuple[str, ...] = ()
) -> tuple[list[Document], list[Document]]:
    """Return the tracked documents (newest first, linked) and resources.

    Every document is loaded once so its title, summary and hashtags are
    known, then unloaded again until its article page is rendered.
    """
    docs = []
    resources = []
    for source in list_tracked_files(cwd):
        if exclude and source.startswith(exclude):
            logger.debug("skip %r", source)
            continue
        commits = read_history(source, cwd)
        newest, oldest = commits[0], commits[-1]
        logger.info("%r - %r", source, newest.subject)
        doc = Document(
            source=source,
            author=newest.author,
            ctime=oldest.time,
            mtime=newest.time,
            commit_subject=newest.subject,
            commit_message=newest.body,
            root=cwd,
        )
        doc.assign_path(extname, use_epochname, baseurl)
        if doc.is_markdown:
            doc.load()
            doc.unload()
            docs.append(doc)
        else:
            resources.append(doc)

    return link_documents(docs), resources
