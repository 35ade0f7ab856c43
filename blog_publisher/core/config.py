"""Publisher configuration."""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from blog_publisher.core.exceptions import ConfigurationError

SYNC_MODES = ("atomic", "per-file")
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


@dataclass
class PublisherConfig:
    """Everything a publish run needs to know.

    token, owner and repo are only required when pushing.
    """
    token: str = ""
    owner: str = ""
    repo: str = ""
    branch: str = "main"
    description: str = "我的个人博客"
    site_title: str = "Blog"
    publish_tag: str = "blog"
    push: bool = True
    sync_mode: str = "atomic"
    vault_path: Path = Path(".")
    source_dirs: List[str] = field(default_factory=list)
    output_dir: Path = Path("public")
    commit_message: Optional[str] = None
    max_workers: int = 4
    timeout: float = 30.0

    def __post_init__(self):
        self.vault_path = Path(self.vault_path)
        self.output_dir = Path(self.output_dir)
        if self.sync_mode not in SYNC_MODES:
            raise ConfigurationError(
                f"sync_mode must be one of {', '.join(SYNC_MODES)}, got {self.sync_mode!r}"
            )

    def require_remote(self) -> None:
        """Fail before any network call if the remote is not configured.

        Raises:
            ConfigurationError: Naming every missing setting
        """
        missing = [
            name for name in ("token", "owner", "repo", "branch")
            if not str(getattr(self, name) or "").strip()
        ]
        if missing:
            raise ConfigurationError(
                f"Missing GitHub settings: {', '.join(missing)}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], environ: Optional[Mapping[str, str]] = None) -> "PublisherConfig":
        """Build a config from a mapping, filling the token from the environment.

        Raises:
            ConfigurationError: On unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: Dict[str, Any] = dict(data)
        environ = os.environ if environ is None else environ
        if not values.get("token"):
            for name in TOKEN_ENV_VARS:
                if environ.get(name):
                    values["token"] = environ[name]
                    break

        return cls(**values)


def load_config(path: Path, environ: Optional[Mapping[str, str]] = None) -> PublisherConfig:
    """Load configuration from a YAML file.

    Relative vault_path and output_dir are resolved against the file's
    directory.

    Raises:
        ConfigurationError: If the file is missing, invalid or has unknown keys
    """
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding='utf-8'))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    for key in ("vault_path", "output_dir"):
        if key in data and not Path(data[key]).is_absolute():
            data[key] = path.parent / data[key]

    return PublisherConfig.from_dict(data, environ)
