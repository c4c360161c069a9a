"""Configuration models for the visual regression pipeline."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

from visualify.models.capture import parse_viewport

DEFAULT_AD_HOSTS = [
    "doubleclick.net",
    "googlesyndication.com",
    "googleadservices.com",
    "adservice.google.com",
    "pagead2.googlesyndication.com",
    "amazon-adsystem.com",
    "adnxs.com",
    "adsrvr.org",
    "criteo.com",
    "criteo.net",
    "taboola.com",
    "outbrain.com",
    "rubiconproject.com",
    "pubmatic.com",
    "openx.net",
    "scorecardresearch.com",
    "moatads.com",
    "quantserve.com",
]


class AuthConfig(BaseModel):
    username: str
    password: str

    @field_validator("password", mode="before")
    @classmethod
    def resolve_env_password(cls, v: str) -> str:
        if isinstance(v, str) and v.startswith("env:"):
            env_var = v[4:]
            resolved = os.environ.get(env_var)
            if resolved is None:
                raise ValueError(f"Environment variable '{env_var}' not set")
            return resolved
        return v


class RetryConfig(BaseModel):
    max_attempts: int = Field(default=5, ge=1)
    delay_seconds: float = Field(default=1.0, ge=0)
    exponential_backoff: bool = False


class GalleryConfig(BaseModel):
    template: str = "slideshow_template"
    thumb_width: int = 200
    thumb_height: int = 400


class VisualifyConfig(BaseModel):
    # Output
    directory: str = "./shots"

    # What to capture: label -> base URL, path key -> URL suffix
    domains: dict[str, str] = Field(default_factory=dict)
    paths: dict[str, str] = Field(default_factory=lambda: {"home": "/"})
    screen_widths: list[Union[int, str]] = Field(default_factory=lambda: [320, 768, 1024])

    # Comparison
    threshold: float = 6.0
    browser: str = "chrome"
    max_width: Optional[int] = Field(default=None, gt=0)  # crop wider screenshots instead of padding

    # Browser session
    navigation_timeout_seconds: float = 90
    headless: bool = True
    no_sandbox: bool = False
    auth: Optional[AuthConfig] = None
    retry: RetryConfig = Field(default_factory=RetryConfig)

    # Request interception
    block_ads: bool = False
    ad_hosts: list[str] = Field(default_factory=lambda: list(DEFAULT_AD_HOSTS))

    # Reporting
    gallery: GalleryConfig = Field(default_factory=GalleryConfig)

    @field_validator("screen_widths")
    @classmethod
    def validate_screen_widths(cls, v: list) -> list:
        for width in v:
            parse_viewport(width)
        return v

    @property
    def domain_labels(self) -> list[str]:
        return list(self.domains.keys())

    def with_overrides(
        self,
        domains: tuple[str, ...] | list[str] = (),
        directory: str | None = None,
    ) -> "VisualifyConfig":
        """Return a copy with command-line domains and output directory applied."""
        update: dict = {}
        if domains:
            update["domains"] = {f"domain{i}": url for i, url in enumerate(domains[:2], 1)}
        if directory:
            update["directory"] = directory
        return self.model_copy(update=update)

    @classmethod
    def load(
        cls,
        path: str | Path,
        defaults_path: str | Path | None = None,
    ) -> "VisualifyConfig":
        """Load config from a JSON or YAML file, layered over an optional defaults file."""
        data: dict = {}
        if defaults_path:
            data.update(_read_config_file(Path(defaults_path)))
        data.update(_read_config_file(Path(path)))
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path) as f:
        if path.suffix.lower() in (".yaml", ".yml"):
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Config file {path} is not valid YAML: {e}") from e
        else:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data
