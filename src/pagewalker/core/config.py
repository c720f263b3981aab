"""Configuration loading and validation utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_ENTRY_FILE = "initial.txt"
DEFAULT_QUERY_FILE = "search.txt"
DEFAULT_SCREENS_DIR = "screens"


class ConfigurationError(RuntimeError):
    """Raised when a required setting is missing or empty."""


@dataclass(slots=True)
class Credentials:
    email: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password='***')"


@dataclass(slots=True)
class SiteLayout:
    """Site specific paths and selectors used by the traversal."""

    listing_path: str = "/es/results/"
    login_path: str = "/es/auth/login"
    page_param: str = "pageno"
    email_selector: str = 'input[name="email"], input[type="email"]'
    password_selector: str = 'input[name="password"], input[type="password"]'
    submit_selector: str = (
        'button[type="submit"], input[type="submit"], .btn-login, .login-btn, [value="Ingresar"]'
    )
    error_selector: str = '.error, .alert, .warning, [class*="error"]'
    auth_markers: tuple[str, ...] = ("login", "auth")
    item_container_selector: str = "div.pointer.me3.relative"
    item_selectors: tuple[str, ...] = (
        'div.pointer.me3.relative.fill-action-unhighlight:not(.fill-action-highlight) '
        '[data-showinterest]:not([data-showinterest=""])',
        '[data-showinterest*="/es/memberrelationship/showInterest/"]',
    )
    modal_close_selector: str = 'a.link[aria-controls="modal"]'

    @property
    def next_page_selector(self) -> str:
        return f'a[href*="{self.page_param}="]'


@dataclass(slots=True)
class ConfigProvider:
    """Reads the traversal targets fresh on every access.

    The files may be edited while the process runs, so nothing is cached.
    Environment variables are used when a file does not exist.
    """

    entry_file: Path
    query_file: Path
    entry_env: str = "ENTRY_URL"
    query_env: str = "QUERY_TOKEN"

    def entry_url(self) -> str:
        value = self._read(self.entry_file, self.entry_env)
        if not value:
            raise ConfigurationError(
                f"Entry URL is required ({self.entry_file} or {self.entry_env})"
            )
        return value

    def query_token(self) -> str:
        value = self._read(self.query_file, self.query_env)
        if not value:
            raise ConfigurationError(
                f"Query token is required ({self.query_file} or {self.query_env})"
            )
        return value

    @staticmethod
    def _read(path: Path, env_name: str) -> str:
        if path.is_file():
            return path.read_text(encoding="utf-8").strip()
        return (os.getenv(env_name) or "").strip()


@dataclass(slots=True)
class AppConfig:
    """Holds runtime options for a traversal session."""

    provider: ConfigProvider
    email: Optional[str]
    password: Optional[str]
    site_url: Optional[str] = None
    headless: bool = True
    screens_dir: Path = field(default_factory=lambda: Path(DEFAULT_SCREENS_DIR))
    layout: SiteLayout = field(default_factory=SiteLayout)

    @property
    def credentials(self) -> Credentials:
        return Credentials(email=self.email or "", password=self.password or "")

    @property
    def login_url(self) -> str:
        return f"{self.site_url}{self.layout.login_path}"

    def validate(self) -> None:
        """Checks every required value and reports all missing ones at once."""

        missing: list[str] = []
        if not self.email:
            missing.append("LISTING_EMAIL")
        if not self.password:
            missing.append("LISTING_PASSWORD")

        entry_url = ""
        try:
            entry_url = self.provider.entry_url()
        except ConfigurationError as exc:
            missing.append(str(exc))
        try:
            self.provider.query_token()
        except ConfigurationError as exc:
            missing.append(str(exc))

        if missing:
            raise ConfigurationError("Missing configuration: " + "; ".join(missing))

        if not self.site_url:
            parsed = urlparse(entry_url)
            if not parsed.scheme or not parsed.netloc:
                raise ConfigurationError(
                    f"Cannot derive SITE_URL from entry URL {entry_url!r}"
                )
            self.site_url = f"{parsed.scheme}://{parsed.netloc}"


def load_configuration(
    entry_file: str = DEFAULT_ENTRY_FILE,
    query_file: str = DEFAULT_QUERY_FILE,
    *,
    site_url: Optional[str] = None,
    headless: Optional[bool] = None,
    screens_dir: Optional[str] = None,
) -> AppConfig:
    """Builds an ``AppConfig`` from CLI input and environment variables."""

    load_dotenv()  # Loads .env values if present

    resolved_site = site_url or os.getenv("SITE_URL") or None
    if headless is None:
        headless = os.getenv("HEADLESS", "true").lower() in {"1", "true", "yes"}

    return AppConfig(
        provider=ConfigProvider(entry_file=Path(entry_file), query_file=Path(query_file)),
        email=os.getenv("LISTING_EMAIL") or None,
        password=os.getenv("LISTING_PASSWORD") or None,
        site_url=resolved_site.rstrip("/") if resolved_site else None,
        headless=headless,
        screens_dir=Path(screens_dir or os.getenv("SCREENS_DIR", DEFAULT_SCREENS_DIR)),
    )
