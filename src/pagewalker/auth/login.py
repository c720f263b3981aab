"""Form login performed once before the traversal starts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from bs4 import BeautifulSoup
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..browser.diagnostics import Snapshotter
from ..core.config import Credentials, SiteLayout
from ..core.pacing import Pacer

logger = logging.getLogger(__name__)

LOGIN_SETTLE_SECONDS = 3.0
FORM_TIMEOUT_MS = 10000
REDIRECT_TIMEOUT_MS = 15000
SLOW_REDIRECT_SECONDS = 5.0


class LoginStatus(Enum):
    SUCCESS = auto()
    STILL_ON_LOGIN = auto()
    FAILED = auto()


@dataclass(frozen=True)
class LoginResult:
    status: LoginStatus
    final_url: Optional[str] = None
    error: Optional[str] = None


def is_auth_url(url: str, layout: SiteLayout) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in layout.auth_markers)


def extract_error_text(html: str, selector: str) -> str:
    """Joins the visible text of every error indicator in ``html``."""

    soup = BeautifulSoup(html, "html.parser")
    messages = [element.get_text(" ", strip=True) for element in soup.select(selector)]
    return "; ".join(message for message in messages if message)


def _probe_errors(session: Any, layout: SiteLayout) -> str:
    try:
        return extract_error_text(session.content(), layout.error_selector)
    except Exception:
        return ""


def _snapshot(snapshotter: Optional[Snapshotter], name: str) -> None:
    if snapshotter is not None:
        snapshotter.capture(name)


def login_with_credentials(
    session: Any,
    navigator: Any,
    pacer: Pacer,
    login_url: str,
    credentials: Credentials,
    layout: SiteLayout,
    snapshotter: Optional[Snapshotter] = None,
) -> LoginResult:
    """Submits the login form and classifies the result by the landing URL.

    Never raises: a failed login is reported and the caller carries on, since
    an existing session may still be valid.
    """

    try:
        navigator.navigate(login_url)
        pacer.sleep(LOGIN_SETTLE_SECONDS)

        session.wait_for_element(layout.email_selector, FORM_TIMEOUT_MS)
        session.wait_for_element(layout.password_selector, FORM_TIMEOUT_MS)
        session.type(layout.email_selector, credentials.email, delay_ms=15)
        pacer.sleep(0.25)
        session.type(layout.password_selector, credentials.password, delay_ms=18)

        _snapshot(snapshotter, "before-login.png")
        session.click(layout.submit_selector)
        logger.info("Login form submitted")
    except Exception as exc:
        logger.error("Login form could not be submitted: %s", exc)
        _snapshot(snapshotter, "login-error.png")
        return LoginResult(LoginStatus.FAILED, error=str(exc))

    try:
        session.wait_for_url(lambda current: not is_auth_url(current, layout), REDIRECT_TIMEOUT_MS)
    except PlaywrightTimeoutError:
        logger.info("No redirect detected, checking current state...")
    except Exception as exc:
        logger.debug("Waiting for login redirect failed: %s", exc)

    _snapshot(snapshotter, "after-login.png")
    current_url = session.current_url
    if not is_auth_url(current_url, layout):
        logger.info("Login succeeded - navigated to: %s", current_url)
        return LoginResult(LoginStatus.SUCCESS, final_url=current_url)

    logger.warning("Still on login page - checking for errors...")
    error_text = _probe_errors(session, layout)
    if error_text:
        logger.warning("Login error found: %s", error_text)

    logger.info("Waiting additional time for a slow redirect...")
    pacer.sleep(SLOW_REDIRECT_SECONDS)
    current_url = session.current_url
    if not is_auth_url(current_url, layout):
        logger.info("Login succeeded after delayed redirect: %s", current_url)
        return LoginResult(LoginStatus.SUCCESS, final_url=current_url)

    logger.warning("Login may have failed - still on %s", current_url)
    return LoginResult(LoginStatus.STILL_ON_LOGIN, final_url=current_url, error=error_text or None)
