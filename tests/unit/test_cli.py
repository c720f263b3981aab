import os
import signal
import time

import pytest

import pagewalker.cli as cli  # type: ignore[import]
import pagewalker.core.config as config_module  # type: ignore[import]
from pagewalker.core.pacing import Pacer  # type: ignore[import]
from pagewalker.traversal.state import TraversalState  # type: ignore[import]

ENV_KEYS = ["LISTING_EMAIL", "LISTING_PASSWORD", "SITE_URL", "ENTRY_URL", "QUERY_TOKEN", "HEADLESS"]


def prepare(monkeypatch, tmp_path, *, credentials=True):
    monkeypatch.setattr(config_module, "load_dotenv", lambda *_args, **_kwargs: False)
    monkeypatch.setattr(cli, "configure_logging", lambda _verbose: None)
    monkeypatch.setattr(cli, "install_signal_handlers", lambda _pacer: None)
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    if credentials:
        monkeypatch.setenv("LISTING_EMAIL", "user@example.com")
        monkeypatch.setenv("LISTING_PASSWORD", "secret")
    (tmp_path / "initial.txt").write_text("https://site/es/results/city=X", encoding="utf-8")
    (tmp_path / "search.txt").write_text("city=X", encoding="utf-8")
    return ["--entry-file", str(tmp_path / "initial.txt"), "--query-file", str(tmp_path / "search.txt")]


class FakeBrowserSession:
    launched = []

    def __init__(self):
        self.closed = False

    @classmethod
    def launch(cls, profile):
        session = cls()
        cls.launched.append((profile, session))
        return session

    def close(self):
        self.closed = True


def test_missing_credentials_exit_before_launch(monkeypatch, tmp_path, capsys):
    argv = prepare(monkeypatch, tmp_path, credentials=False)
    FakeBrowserSession.launched = []
    monkeypatch.setattr(cli, "BrowserSession", FakeBrowserSession)

    assert cli.run_cli(argv) == 2
    assert FakeBrowserSession.launched == []
    assert "LISTING_EMAIL" in capsys.readouterr().out


def test_session_closed_and_pacer_cancelled_after_run(monkeypatch, tmp_path):
    argv = prepare(monkeypatch, tmp_path)
    FakeBrowserSession.launched = []
    monkeypatch.setattr(cli, "BrowserSession", FakeBrowserSession)
    seen = {}

    class FakeMachine:
        @classmethod
        def from_config(cls, session, config, pacer):
            seen["config"] = config
            seen["pacer"] = pacer
            return cls()

        def run(self):
            return TraversalState(total_activation_count=4, pages_processed=2)

    monkeypatch.setattr(cli, "TraversalStateMachine", FakeMachine)

    assert cli.run_cli(argv + ["--headed"]) == 0

    profile, session = FakeBrowserSession.launched[0]
    assert profile.headless is False
    assert session.closed is True
    assert seen["pacer"].cancelled is True
    assert seen["config"].site_url == "https://site"


def test_session_closed_when_run_raises(monkeypatch, tmp_path):
    argv = prepare(monkeypatch, tmp_path)
    FakeBrowserSession.launched = []
    monkeypatch.setattr(cli, "BrowserSession", FakeBrowserSession)

    class ExplodingMachine:
        @classmethod
        def from_config(cls, session, config, pacer):
            return cls()

        def run(self):
            raise RuntimeError("browser disconnected")

    monkeypatch.setattr(cli, "TraversalStateMachine", ExplodingMachine)

    with pytest.raises(RuntimeError):
        cli.run_cli(argv)

    _, session = FakeBrowserSession.launched[0]
    assert session.closed is True


def test_sigterm_while_pacer_registry_is_locked_still_stops():
    pacer = Pacer()
    previous = {signum: signal.getsignal(signum) for signum in (signal.SIGINT, signal.SIGTERM)}
    try:
        cli.install_signal_handlers(pacer)
        with pacer._lock:
            os.kill(os.getpid(), signal.SIGTERM)
            time.sleep(0.05)
            stopped_inside_lock = pacer.cancelled
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    assert stopped_inside_lock is True
    assert pacer.sleep(10) is False
