"""Tests for the hover session state machine."""

import asyncio
import logging

import pytest

from taxonpreview.config.models import HoverTiming
from taxonpreview.preview.controller import HoverSessionController
from taxonpreview.preview.models import Placement, PopupState, Rect, Viewport
from taxonpreview.preview.resolver import SourceResolver
from taxonpreview.preview.surface import LOADING_TEXT, PopupSurface

ANCHOR = Rect(left=100, top=200, right=180, bottom=220)
VIEWPORT = Viewport(width=1280, height=800)

FELIS_HTML = "<p>Felis is a genus of small and medium-sized cat species.</p>"


@pytest.fixture
def make_controller(source_client):
    """Build controllers with a fresh popup surface and the given timing."""

    def factory(timing: HoverTiming | None = None) -> HoverSessionController:
        return HoverSessionController(SourceResolver(source_client), PopupSurface(), timing=timing)

    return factory


@pytest.fixture
def controller(make_controller, fast_timing):
    return make_controller(fast_timing)


async def _settle():
    """Let call_soon callbacks run."""
    await asyncio.sleep(0)
    await asyncio.sleep(0)


async def _requests(backend, endpoint: str, count: int):
    """Wait until ``count`` requests reached ``endpoint``."""
    while len(backend.calls_to(endpoint)) < count:
        await asyncio.sleep(0)


def _preview_problems(caplog) -> list[logging.LogRecord]:
    return [
        record
        for record in caplog.records
        if record.name.startswith("taxonpreview.preview") and record.levelno >= logging.WARNING
    ]


class TestShowing:
    """Test showing the popup on anchor hover."""

    @pytest.mark.asyncio
    async def test_enter_shows_loading_then_result(self, controller, lion_wikimedia):
        """Should attach with a loading placeholder, then render and reveal."""
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)

        assert controller.state == PopupState.VISIBLE
        assert controller.surface.displayed
        assert not controller.surface.visible
        assert LOADING_TEXT in controller.surface.content_html

        await controller.wait_for_render()
        await _settle()

        assert controller.session.loaded
        assert controller.surface.render_count == 1
        assert "Panthera leo" in controller.surface.content_html
        assert controller.surface.visible
        assert controller.surface.placement == Placement(left=195, top=135, side="right")

    @pytest.mark.asyncio
    async def test_placement_uses_measured_size(self, controller, lion_wikimedia):
        """Should place with the measured popup size and flip near the edge."""
        controller.surface.size = (300, 100)

        controller.anchor_enter(ANCHOR, "Panthera leo", Viewport(width=490, height=800))
        await _settle()

        assert controller.surface.placement == Placement(left=-215, top=160, side="left")
        await controller.wait_for_render()

    @pytest.mark.asyncio
    async def test_rehover_reuses_loaded_content(self, controller, lion_wikimedia):
        """Should not issue a new request when re-hovering the loaded subject."""
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()

        controller.anchor_leave()
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()

        assert lion_wikimedia.calls_to("article") == ["Panthera leo"]
        assert controller.surface.render_count == 1
        assert LOADING_TEXT not in controller.surface.content_html
        assert controller.state == PopupState.VISIBLE

    @pytest.mark.asyncio
    async def test_switching_subject_resolves_again(self, controller, lion_wikimedia):
        """Should reset to loading and resolve the new subject."""
        lion_wikimedia.add_article("Felis", FELIS_HTML)
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()

        controller.anchor_enter(ANCHOR, "Felis", VIEWPORT)

        assert not controller.session.loaded
        assert LOADING_TEXT in controller.surface.content_html

        await controller.wait_for_render()

        assert controller.session.subject == "Felis"
        assert "Felis is a genus" in controller.surface.content_html
        assert controller.surface.render_count == 2

    @pytest.mark.asyncio
    async def test_rapid_hovers_render_only_latest(self, controller, lion_wikimedia, caplog):
        """Should never render a response from a superseded hover, and log no problem."""
        caplog.set_level(logging.DEBUG)
        lion_wikimedia.add_article("Felis", FELIS_HTML)
        gate = lion_wikimedia.gate("article", "Panthera leo")

        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await _settle()
        controller.anchor_enter(ANCHOR, "Felis", VIEWPORT)
        await controller.wait_for_render()

        gate.set()
        await asyncio.sleep(0.01)

        assert controller.surface.render_count == 1
        assert "Felis is a genus" in controller.surface.content_html
        assert controller.session.subject == "Felis"
        assert _preview_problems(caplog) == []

    @pytest.mark.asyncio
    async def test_same_subject_twice_while_loading(self, controller, lion_wikimedia):
        """Should restart resolution for an unloaded subject and render it once."""
        gate = lion_wikimedia.gate("article", "Panthera leo")

        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await _requests(lion_wikimedia, "article", 1)
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await _requests(lion_wikimedia, "article", 2)
        gate.set()
        await controller.wait_for_render()

        assert len(lion_wikimedia.calls_to("article")) == 2
        assert controller.surface.render_count == 1
        assert controller.session.loaded

    @pytest.mark.asyncio
    async def test_unexpected_error_renders_no_entry(self, controller, mocker, caplog):
        """Should log an unexpected resolver error and fall back to the no-entry popup."""
        mocker.patch.object(controller.resolver, "resolve", side_effect=RuntimeError("boom"))

        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()

        assert controller.session.loaded
        assert LOADING_TEXT not in controller.surface.content_html
        assert "species.wikimedia.org" in controller.surface.content_html
        assert not controller.surface.footer_visible
        assert any(
            record.levelno == logging.ERROR and record.name == "taxonpreview.preview.controller"
            for record in caplog.records
        )

    @pytest.mark.asyncio
    async def test_no_entry_hides_footer(self, controller, wikimedia):
        """Should render the fallback with the footer hidden."""
        controller.anchor_enter(ANCHOR, "Xyzzyplasia nonexistus", VIEWPORT)
        await controller.wait_for_render()

        assert not controller.surface.footer_visible
        assert "species.wikimedia.org" in controller.surface.content_html


class TestHiding:
    """Test grace periods and the hide sequence."""

    @pytest.mark.asyncio
    async def test_pointer_moves_onto_popup(self, make_controller, lion_wikimedia):
        """Should stay open when the pointer reaches the popup within the anchor grace."""
        controller = make_controller()
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await asyncio.sleep(0.05)

        controller.anchor_leave()
        await asyncio.sleep(0.1)
        controller.popup_enter()
        await asyncio.sleep(0.4)

        assert controller.state == PopupState.VISIBLE
        assert controller.is_visible
        assert controller.surface.displayed
        assert controller.surface.visible

    @pytest.mark.asyncio
    async def test_hides_after_leaving_anchor(self, controller, lion_wikimedia):
        """Should hide and forget the subject once the grace period passes."""
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()

        controller.anchor_leave()
        assert controller.state == PopupState.HIDE_GRACE

        await asyncio.sleep(0.1)

        assert controller.state == PopupState.HIDDEN
        assert not controller.surface.displayed
        assert controller.session.subject is None
        assert not controller.session.loaded

    @pytest.mark.asyncio
    async def test_hides_after_leaving_popup(self, controller, lion_wikimedia):
        """Should hide after the popup grace once the pointer leaves the popup."""
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()
        controller.anchor_leave()
        controller.popup_enter()

        await asyncio.sleep(0.05)
        assert controller.state == PopupState.VISIBLE

        controller.popup_leave()
        await asyncio.sleep(0.1)

        assert controller.state == PopupState.HIDDEN
        assert not controller.surface.displayed

    @pytest.mark.asyncio
    async def test_return_to_anchor_cancels_hide(self, controller, lion_wikimedia):
        """Should cancel the pending hide when the anchor is entered again."""
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        controller.anchor_leave()

        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await asyncio.sleep(0.1)

        assert controller.state == PopupState.VISIBLE
        assert controller.session.pending_hide_timer is None

    @pytest.mark.asyncio
    async def test_conceals_before_collapse(self, make_controller, lion_wikimedia):
        """Should remove visible styling first and detach after the collapse delay."""
        controller = make_controller(
            HoverTiming(anchor_grace_ms=10, popup_grace_ms=10, collapse_ms=200)
        )
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()
        controller.anchor_leave()

        await asyncio.sleep(0.05)

        assert not controller.surface.visible
        assert controller.surface.displayed
        assert not controller.is_visible

        await asyncio.sleep(0.3)

        assert not controller.surface.displayed
        assert controller.state == PopupState.HIDDEN

    @pytest.mark.asyncio
    async def test_popup_enter_while_collapsing(self, make_controller, lion_wikimedia):
        """Should finish the collapse and still hide after a later hover."""
        controller = make_controller(
            HoverTiming(anchor_grace_ms=10, popup_grace_ms=10, collapse_ms=200)
        )
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()
        controller.anchor_leave()
        await asyncio.sleep(0.05)

        controller.popup_enter()

        assert controller.state == PopupState.HIDDEN
        assert not controller.surface.displayed
        assert controller.session.pending_hide_timer is None
        assert not controller.session.popup_hover

        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()
        controller.anchor_leave()
        await asyncio.sleep(0.5)

        assert controller.state == PopupState.HIDDEN
        assert not controller.surface.displayed

    @pytest.mark.asyncio
    async def test_anchor_enter_while_collapsing(self, make_controller, lion_wikimedia):
        """Should show the loaded content again without a new request."""
        controller = make_controller(
            HoverTiming(anchor_grace_ms=10, popup_grace_ms=10, collapse_ms=200)
        )
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await controller.wait_for_render()
        controller.anchor_leave()
        await asyncio.sleep(0.05)

        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        await _settle()
        await asyncio.sleep(0.3)

        assert controller.state == PopupState.VISIBLE
        assert controller.surface.displayed
        assert controller.surface.visible
        assert lion_wikimedia.calls_to("article") == ["Panthera leo"]

    @pytest.mark.asyncio
    async def test_hide_cancels_inflight_request(self, controller, lion_wikimedia):
        """Should cancel the pending resolution when the popup fully hides."""
        lion_wikimedia.gate("article", "Panthera leo")
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        token = controller.coordinator.current

        controller.anchor_leave()
        await asyncio.sleep(0.1)
        await controller.wait_for_render()

        assert controller.state == PopupState.HIDDEN
        assert token.cancelled
        assert controller.surface.render_count == 0

    @pytest.mark.asyncio
    async def test_leave_while_hidden_is_ignored(self, controller):
        """Should not schedule anything when nothing is shown."""
        controller.anchor_leave()
        controller.popup_leave()

        assert controller.state == PopupState.HIDDEN
        assert controller.session.pending_hide_timer is None


class TestDispose:
    """Test controller teardown."""

    @pytest.mark.asyncio
    async def test_dispose_releases_everything(self, controller, lion_wikimedia):
        """Should cancel work and timers and detach the popup."""
        lion_wikimedia.gate("article", "Panthera leo")
        controller.anchor_enter(ANCHOR, "Panthera leo", VIEWPORT)
        controller.anchor_leave()
        token = controller.coordinator.current

        controller.dispose()
        await controller.wait_for_render()

        assert token.cancelled
        assert controller.state == PopupState.HIDDEN
        assert not controller.surface.displayed
        assert controller.session.pending_hide_timer is None
        assert controller.session.pending_show_debounce is None
        assert controller.session.subject is None
