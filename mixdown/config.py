from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .errors import ConfigError

try:
    import tomllib as toml
except ImportError:
    try:
        import tomli as toml
    except ImportError:  # pragma: no cover - optional dependency
        toml = None

try:
    import yaml
except ImportError:  # pragma: no cover - optional dependency
    yaml = None

MIXDOWN_DIR = ".mixdown"
CONFIG_PATH = Path(MIXDOWN_DIR) / "config.json"
EXTNAME_RE = re.compile(r"\w+", re.ASCII)


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        if toml is None:
            raise ConfigError("TOML config requires tomllib (Python 3.11+) or tomli.")
        try:
            data = toml.loads(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise ConfigError(f"Invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        if yaml is None:
            raise ConfigError("YAML config requires PyYAML.")
        try:
            data = yaml.safe_load(text)
        except Exception as exc:  # pragma: no cover - depends on parser
            raise ConfigError(f"Invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping: {path}")
    return data


def is_inside_mixdown_dir(outdir: str) -> bool:
    parts = PurePosixPath(Path(outdir).as_posix()).parts
    while parts and parts[0] == ".":
        parts = parts[1:]
    return bool(parts) and parts[0] == MIXDOWN_DIR


@dataclass
class Settings:
    outdir: str = "docs"
    use_epochname: bool = False
    extname: str = "html"
    narchive: int = 40
    baseurl: str = "/"
    theme_dir: str = str(Path(MIXDOWN_DIR) / "theme")
    pygments_style: str = "default"

    def validate(self) -> None:
        if is_inside_mixdown_dir(self.outdir):
            raise ConfigError(
                f"invalid outdir {self.outdir!r} - cannot be output to the {MIXDOWN_DIR!r} directory"
            )
        if not EXTNAME_RE.fullmatch(self.extname):
            raise ConfigError(f"invalid extname {self.extname!r} - extname must be [0-9a-zA-Z_]+")
        if self.narchive < 1:
            raise ConfigError(f"invalid narchive {self.narchive} - narchive must be greater than 0")
