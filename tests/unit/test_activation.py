from pagewalker.browser.diagnostics import Snapshotter  # type: ignore[import]
from pagewalker.core.config import SiteLayout  # type: ignore[import]
from pagewalker.traversal.activation import ActivationEngine, build_strategies  # type: ignore[import]

from tests.helpers.fakes import FakeElement, FakePacer, FakeSession

LAYOUT = SiteLayout()
PRIMARY, FALLBACK = LAYOUT.item_selectors


def items(count, *, failing=()):
    return [FakeElement(f"item-{index}", fail=index in failing) for index in range(1, count + 1)]


def build_engine(session, pacer=None, snapshotter=None):
    return ActivationEngine(session=session, pacer=pacer or FakePacer(), snapshotter=snapshotter, layout=LAYOUT)


def test_activates_every_primary_item_in_order():
    elements = items(5)
    session = FakeSession(elements={PRIMARY: elements})

    assert build_engine(session).activate_current_page() == 5

    assert [element.clicks for element in elements] == [1, 1, 1, 1, 1]
    assert FALLBACK not in session.queries


def test_fallback_runs_when_primary_finds_nothing():
    fallback = items(3)
    session = FakeSession(elements={PRIMARY: [], FALLBACK: fallback})

    report = build_engine(session).scan_and_activate()

    assert session.queries == [PRIMARY, FALLBACK]
    assert report.strategy == "fallback-1"
    assert report.attempted == 3
    assert report.activated == 3
    assert all(element.clicks == 1 for element in fallback)


def test_fallback_runs_when_primary_query_fails():
    session = FakeSession(elements={FALLBACK: items(2)})
    session.query_errors.add(PRIMARY)

    assert build_engine(session).activate_current_page() == 2


def test_failed_item_does_not_stop_the_page():
    elements = items(4, failing={2})
    session = FakeSession(elements={PRIMARY: elements})

    report = build_engine(session).scan_and_activate()

    assert report.attempted == 4
    assert report.activated == 3
    assert len(report.failures) == 1
    assert [element.clicks for element in elements] == [1, 1, 1, 1]


def test_page_without_qualifying_items_is_a_no_op():
    session = FakeSession(elements={PRIMARY: [], FALLBACK: []})
    pacer = FakePacer()

    engine = build_engine(session, pacer)

    assert engine.activate_current_page() == 0
    assert engine.activate_current_page() == 0
    assert session.evaluations == []
    assert pacer.jitters == []


def test_modal_dismissal_is_fired_per_activation_and_failures_are_ignored():
    session = FakeSession(elements={PRIMARY: items(3, failing={3})})
    session.evaluate_error = RuntimeError("execution context was destroyed")

    assert build_engine(session).activate_current_page() == 2
    assert session.evaluations == [LAYOUT.modal_close_selector] * 2


def test_pauses_a_random_short_delay_after_each_item():
    session = FakeSession(elements={PRIMARY: items(3, failing={1})})
    pacer = FakePacer()

    build_engine(session, pacer).activate_current_page()

    assert pacer.jitters == [(0.1, 0.3)] * 3


def test_stops_between_items_when_cancelled():
    elements = items(3)
    session = FakeSession(elements={PRIMARY: elements})
    pacer = FakePacer()
    pacer.cancel()

    assert build_engine(session, pacer).activate_current_page() == 1
    assert [element.clicks for element in elements] == [1, 0, 0]


def test_missing_container_still_scans():
    session = FakeSession(elements={PRIMARY: items(2)})
    session.wait_failures.add(LAYOUT.item_container_selector)

    assert build_engine(session).activate_current_page() == 2


def test_snapshots_before_and_after(tmp_path):
    session = FakeSession(elements={PRIMARY: items(1)})
    engine = build_engine(session, snapshotter=Snapshotter(session, tmp_path))

    engine.activate_current_page()

    assert session.screenshots == ["before-activation.png", "after-activation.png"]


def test_snapshot_failure_does_not_abort_page(tmp_path):
    session = FakeSession(elements={PRIMARY: items(2)})
    session.screenshot_error = RuntimeError("target closed")
    engine = build_engine(session, snapshotter=Snapshotter(session, tmp_path))

    assert engine.activate_current_page() == 2


def test_only_primary_strategy_excludes_activated_items():
    strategies = build_strategies(LAYOUT)

    assert [strategy.name for strategy in strategies] == ["primary", "fallback-1"]
    assert [strategy.excludes_activated for strategy in strategies] == [True, False]
