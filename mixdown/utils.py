from __future__ import annotations

import datetime as dt
import shutil
from pathlib import Path, PurePosixPath
from urllib.parse import quote

from .errors import ConfigError

ISO8601_BASIC = "%Y%m%dT%H%M%SZ"
PATH_SAFE = "!$&'()*+,;=:@"


def parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return False


def parse_int(value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return default


def basename(pathname: str) -> str:
    """File name of ``pathname`` without its last extension."""
    name = PurePosixPath(pathname).name
    stem, dot, _ = name.rpartition(".")
    return stem if dot and stem else name


def escape_path(segment: str) -> str:
    return quote(segment, safe=PATH_SAFE)


def join_url(base: str, path: str) -> str:
    base = base.rstrip("/")
    path = path.lstrip("/")
    if not path:
        return f"{base}/"
    return f"{base}/{path}"


def epoch_to_datetime(epoch: int) -> dt.datetime:
    return dt.datetime.fromtimestamp(epoch, tz=dt.timezone.utc)


def epoch_to_iso8601(epoch: int) -> str:
    return epoch_to_datetime(epoch).strftime(ISO8601_BASIC)


def clean_output_dir(output_dir: Path, project_root: Path) -> None:
    if not output_dir.exists():
        return
    output_resolved = output_dir.resolve()
    root_resolved = project_root.resolve()
    if output_resolved == root_resolved:
        raise ConfigError(f"refusing to clean project root {output_dir}")
    if not output_resolved.is_relative_to(root_resolved):
        raise ConfigError(f"refusing to clean output directory outside project root: {output_dir}")
    shutil.rmtree(output_dir)
