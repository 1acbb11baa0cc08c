"""
Loading and validation of the SiteDigest crawler configuration.
The schema is described with Pydantic; YAML and JSON files are supported.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Seeds on these domains are rejected before any request is made.
DEFAULT_BLOCKED_DOMAINS: Tuple[str, ...] = (
    "google.com",
    "facebook.com",
    "twitter.com",
    "instagram.com",
    "linkedin.com",
)

# Hosts that get a friendlier error once every fetch attempt has failed.
DEFAULT_BLOCKING_HOSTS: Tuple[str, ...] = ("google.com", "facebook.com", "twitter.com")


class CrawlerConfig(BaseModel):
    """Configuration for crawl runs."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_pages: int = Field(50, ge=1, description="Cap on the number of discovered URLs.")
    max_links_per_page: int = Field(10, ge=1, description="Links enqueued per visited page.")
    timeout: float = Field(15.0, gt=0, description="Timeout of a single request attempt (seconds).")
    discovery_retries: int = Field(2, ge=1, description="Fetch attempts per URL during discovery.")
    page_retries: int = Field(3, ge=1, description="Fetch attempts per URL while crawling pages.")
    backoff_factor: float = Field(1.0, ge=0, description="Backoff sleep is factor * 2**attempt seconds.")
    page_delay: float = Field(1.0, ge=0, description="Pause between successive page crawls (seconds).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="User-Agent header.")
    blocked_domains: Tuple[str, ...] = Field(DEFAULT_BLOCKED_DOMAINS, description="Seed deny-list.")
    blocking_hosts: Tuple[str, ...] = Field(DEFAULT_BLOCKING_HOSTS, description="Hosts known to block bots.")

    max_title_length: int = Field(200, ge=1)
    max_content_length: int = Field(15000, ge=1)
    max_summary_length: int = Field(300, ge=1)
    min_content_length: int = Field(100, ge=0, description="Text a content container must exceed.")
    summary_sentences: int = Field(3, ge=1)
    min_sentence_length: int = Field(20, ge=0)

    @field_validator("blocked_domains", "blocking_hosts", mode="before")
    def _normalize_domains(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple)):
            return tuple(str(d).strip().lower() for d in v if str(d).strip())
        return v

    @model_validator(mode="after")
    def _check_summary_room(self) -> CrawlerConfig:
        if self.max_summary_length > self.max_content_length:
            raise ValueError("max_summary_length must not exceed max_content_length")
        return self


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> CrawlerConfig:
    """
    Read YAML or JSON and return a validated CrawlerConfig.

    Without *path* the project default ``configs/default.yaml`` is used when it
    exists, built-in defaults otherwise. An explicit path that does not exist
    raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return CrawlerConfig()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return CrawlerConfig(**data)


__all__ = ["CrawlerConfig", "load_config", "ValidationError", "DEFAULT_USER_AGENT"]
