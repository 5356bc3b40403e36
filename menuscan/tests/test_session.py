from __future__ import annotations

import asyncio

import pytest

from menuscan.analytics.store import clear_events, get_events
from menuscan.catalog.data_store import StaticCatalogProvider
from menuscan.catalog.models import CatalogItem
from menuscan.personalization.models import UserPreferenceVector
from menuscan.session.config import ScanConfig
from menuscan.session.controller import ScanSessionController
from menuscan.session.errors import CaptureError
from menuscan.session.models import (
    Analyzing,
    Failed,
    FailureReason,
    Idle,
    Results,
    ScanPhase,
)


def _item(item_id: str, name: str, values=(5, 5, 5, 5, 5)) -> CatalogItem:
    size, body, sweet, flavor, cream = values
    return CatalogItem(
        id=item_id, name=name, species="", origin="",
        size=size, body=body, sweet_brininess=sweet, flavorfulness=flavor, creaminess=cream,
    )


CATALOG = [_item("1", "Blue Point", (6, 5, 7, 5, 4)), _item("2", "Kumamoto", (3, 6, 3, 7, 8))]
MENU = ["Blue Point 12.99", "Kumamoto", "Price 15.99"]


class FakeCamera:
    def __init__(self, outcomes=None):
        # Each outcome is an image ref or an exception to raise
        self.outcomes = list(outcomes or ["photo-1.jpg"])
        self.calls = 0

    async def capture(self):
        outcome = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeRecognizer:
    def __init__(self, lines=None, error=None, gate: asyncio.Event | None = None):
        self.lines = MENU if lines is None else lines
        self.error = error
        self.gate = gate
        self.started = asyncio.Event() if gate is not None else None
        self.seen: list = []

    async def recognize(self, image_ref):
        self.seen.append(image_ref)
        if self.gate is not None:
            self.started.set()
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return list(self.lines)


class CountingCatalog(StaticCatalogProvider):
    def __init__(self, items):
        super().__init__(items)
        self.calls = 0

    def get_all_catalog_items(self):
        self.calls += 1
        return super().get_all_catalog_items()


class BrokenCatalog:
    def get_all_catalog_items(self):
        raise RuntimeError("catalog service down")


class FixedPreferences:
    def __init__(self, prefs=None, error=None):
        self.prefs = prefs
        self.error = error

    def get_preference_vector(self, user_id):
        if self.error is not None:
            raise self.error
        return self.prefs


def _controller(camera=None, recognizer=None, catalog=None, **kwargs) -> ScanSessionController:
    return ScanSessionController(
        camera=camera or FakeCamera(),
        recognizer=recognizer or FakeRecognizer(),
        catalog_provider=catalog or StaticCatalogProvider(CATALOG),
        **kwargs,
    )


# ── Happy path ───────────────────────────────────────────────────────────


def test_starts_idle():
    controller = _controller()
    assert isinstance(controller.state, Idle)
    assert controller.phase is ScanPhase.idle


def test_scan_reaches_results():
    controller = _controller()
    state = asyncio.run(controller.scan())

    assert isinstance(state, Results)
    assert [m.item.id for m in state.result.matches] == ["1", "2"]
    assert state.result.unmatched == []
    assert all(m.personalized_score == 50 for m in state.result.matches)
    assert not hasattr(state, "image_ref")


def test_image_is_held_only_while_analyzing():
    gate = asyncio.Event()
    recognizer = FakeRecognizer(gate=gate)
    controller = _controller(recognizer=recognizer)

    async def run():
        task = asyncio.ensure_future(controller.scan())
        await recognizer.started.wait()
        assert isinstance(controller.state, Analyzing)
        assert controller.state.image_ref == "photo-1.jpg"
        gate.set()
        return await task

    state = asyncio.run(run())
    assert isinstance(state, Results)
    assert recognizer.seen == ["photo-1.jpg"]


def test_preferences_personalize_scores():
    prefs = UserPreferenceVector(
        avg_size=3, avg_body=6, avg_sweet_brininess=3, avg_flavorfulness=7, avg_creaminess=8,
    )
    controller = _controller(preference_provider=FixedPreferences(prefs), user_id="u1")
    state = asyncio.run(controller.scan())
    scores = {m.item.id: m.personalized_score for m in state.result.matches}
    assert scores["2"] == 100
    assert scores["1"] < 100


def test_preference_failure_degrades_to_neutral():
    provider = FixedPreferences(error=RuntimeError("profile service down"))
    controller = _controller(preference_provider=provider, user_id="u1")
    state = asyncio.run(controller.scan())
    assert isinstance(state, Results)
    assert all(m.personalized_score == 50 for m in state.result.matches)


# ── Failures ─────────────────────────────────────────────────────────────


def test_no_text_detected():
    controller = _controller(recognizer=FakeRecognizer(lines=[]))
    state = asyncio.run(controller.scan())
    assert isinstance(state, Failed)
    assert state.reason is FailureReason.NO_TEXT_DETECTED
    assert state.title == "No Text Detected"
    assert state.message == "Point camera at menu text and try again."
    assert not hasattr(state, "image_ref")


def test_capture_failure_skips_recognition_and_catalog():
    recognizer = FakeRecognizer()
    catalog = CountingCatalog(CATALOG)
    controller = _controller(
        camera=FakeCamera([CaptureError("permission denied")]),
        recognizer=recognizer,
        catalog=catalog,
    )
    state = asyncio.run(controller.scan())
    assert isinstance(state, Failed)
    assert state.reason is FailureReason.CAPTURE_ERROR
    assert recognizer.seen == []
    assert catalog.calls == 0


def test_unexpected_camera_error_maps_to_capture_error():
    controller = _controller(camera=FakeCamera([OSError("no device")]))
    state = asyncio.run(controller.scan())
    assert state.reason is FailureReason.CAPTURE_ERROR


def test_recognition_failure():
    controller = _controller(recognizer=FakeRecognizer(error=TimeoutError("ocr timeout")))
    state = asyncio.run(controller.scan())
    assert isinstance(state, Failed)
    assert state.reason is FailureReason.RECOGNITION_ERROR
    assert state.title == "Scan Failed"


def test_catalog_failure():
    controller = _controller(catalog=BrokenCatalog())
    state = asyncio.run(controller.scan())
    assert state.reason is FailureReason.CATALOG_ERROR


def test_noise_only_menu_is_no_matches():
    controller = _controller(recognizer=FakeRecognizer(lines=["Price 15.99", "RAW BAR"]))
    state = asyncio.run(controller.scan())
    assert isinstance(state, Failed)
    assert state.reason is FailureReason.NO_MATCHES


def test_empty_results_can_be_shown_instead():
    controller = _controller(
        recognizer=FakeRecognizer(lines=["Price 15.99"]),
        config=ScanConfig(empty_results_as_failure=False),
    )
    state = asyncio.run(controller.scan())
    assert isinstance(state, Results)
    assert state.result.is_empty


def test_retry_after_failure():
    camera = FakeCamera([CaptureError("busy"), "photo-2.jpg"])
    controller = _controller(camera=camera)

    async def run():
        first = await controller.scan()
        second = await controller.retry()
        return first, second

    first, second = asyncio.run(run())
    assert first.reason is FailureReason.CAPTURE_ERROR
    assert isinstance(second, Results)
    assert second.attempt == first.attempt + 1


def test_retry_ignored_outside_failed():
    controller = _controller()
    state = asyncio.run(controller.retry())
    assert isinstance(state, Idle)


# ── Single flight and cancellation ───────────────────────────────────────


def test_second_scan_is_rejected_while_analyzing():
    gate = asyncio.Event()
    camera = FakeCamera()
    recognizer = FakeRecognizer(gate=gate)
    controller = _controller(camera=camera, recognizer=recognizer)

    async def run():
        task = asyncio.ensure_future(controller.scan())
        await recognizer.started.wait()
        rejected = await controller.scan()
        gate.set()
        return rejected, await task

    rejected, final = asyncio.run(run())
    assert isinstance(rejected, Analyzing)
    assert camera.calls == 1
    assert isinstance(final, Results)


def test_scan_again_from_results():
    controller = _controller(camera=FakeCamera(["photo-1.jpg", "photo-2.jpg"]))

    async def run():
        await controller.scan()
        return await controller.scan()

    state = asyncio.run(run())
    assert isinstance(state, Results)
    assert state.attempt == 2


def test_dismiss_discards_in_flight_result():
    gate = asyncio.Event()
    recognizer = FakeRecognizer(gate=gate)
    controller = _controller(recognizer=recognizer)

    async def run():
        task = asyncio.ensure_future(controller.scan())
        await recognizer.started.wait()
        controller.dismiss()
        gate.set()
        final = await task
        await asyncio.sleep(0)
        return final

    final = asyncio.run(run())
    assert isinstance(final, Idle)
    assert isinstance(controller.state, Idle)
    assert controller.state.attempt == 2


# ── Late results ──────────────────────────────────────────────────────


class LateRecognizer:
    """Ignores cancellation and hands back lines anyway."""

    def __init__(self):
        self.started = asyncio.Event()

    async def recognize(self, image_ref):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            pass
        return ["Kumamoto"]


class BlockingCamera:
    def __init__(self, swallow_cancel=False):
        self.started = asyncio.Event()
        self.swallow_cancel = swallow_cancel

    async def capture(self):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            if not self.swallow_cancel:
                raise
        return "late-photo.jpg"


def test_late_recognition_result_never_reaches_results():
    clear_events()
    recognizer = LateRecognizer()
    controller = _controller(recognizer=recognizer)

    async def run():
        task = asyncio.ensure_future(controller.scan())
        await recognizer.started.wait()
        controller.dismiss()
        return await task

    final = asyncio.run(run())
    assert isinstance(final, Idle)
    assert controller.state == Idle(attempt=2)
    assert get_events("scan") == []


@pytest.mark.parametrize("swallow_cancel", [False, True])
def test_dismiss_while_capturing(swallow_cancel):
    camera = BlockingCamera(swallow_cancel=swallow_cancel)
    recognizer = FakeRecognizer()
    controller = _controller(camera=camera, recognizer=recognizer)

    async def run():
        task = asyncio.ensure_future(controller.scan())
        await camera.started.wait()
        assert controller.phase is ScanPhase.capturing
        controller.dismiss()
        return await task

    final = asyncio.run(run())
    assert isinstance(final, Idle)
    assert controller.state == Idle(attempt=2)
    assert recognizer.seen == []


def test_blank_recognized_lines_count_as_no_text():
    controller = _controller(recognizer=FakeRecognizer(lines=["", "   ", "\t"]))
    state = asyncio.run(controller.scan())
    assert isinstance(state, Failed)
    assert state.reason is FailureReason.NO_TEXT_DETECTED


# ── Analytics ────────────────────────────────────────────────────────────


def test_finished_attempts_are_recorded():
    clear_events()

    async def run():
        ok = _controller()
        await ok.scan()
        empty = _controller(recognizer=FakeRecognizer(lines=[]))
        await empty.scan()

    asyncio.run(run())
    events = get_events("scan")
    assert [e["outcome"] for e in events] == ["results", "no_text_detected"]
    assert events[0]["matches"] == 2
    assert events[0]["matched_items"] == ["Blue Point", "Kumamoto"]
