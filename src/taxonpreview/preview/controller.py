"""Hover session state machine.

States move ``HIDDEN -> SHOWING -> VISIBLE -> HIDE_GRACE -> HIDDEN``. Leaving
the anchor or the popup only schedules an attempt-hide check; the popup hides
when that check finds neither the anchor nor the popup hovered. The anchor
grace is longer than the popup grace so the pointer can travel from the link
to the popup without the popup flickering away.

Everything runs on one event loop. Timers are loop handles kept on the
session and released whenever a later transition supersedes them.
"""

import asyncio
import logging

from taxonpreview.config.models import HoverTiming, PlacementConfig
from taxonpreview.preview.coordinator import CancellationToken, RequestCoordinator
from taxonpreview.preview.models import (
    PopupState,
    PreviewSession,
    PreviewSubject,
    Rect,
    Viewport,
)
from taxonpreview.preview.placement import compute_placement
from taxonpreview.preview.resolver import SourceResolver
from taxonpreview.preview.surface import RenderSurface

logger = logging.getLogger(__name__)


class HoverSessionController:
    """Owns one popup surface and its PreviewSession."""

    def __init__(
        self,
        resolver: SourceResolver,
        surface: RenderSurface,
        timing: HoverTiming | None = None,
        placement: PlacementConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            resolver: Fallback chain used to resolve subjects
            surface: Popup the controller renders into
            timing: Hide grace periods and collapse delay
            placement: Placement constants
            loop: Event loop for timers; defaults to the running loop
        """
        self.resolver = resolver
        self.coordinator: RequestCoordinator = resolver.coordinator
        self.surface = surface
        self.timing = timing or HoverTiming()
        self.placement_config = placement or PlacementConfig()
        self._loop = loop
        self.session = PreviewSession.create()
        self.state = PopupState.HIDDEN
        self._collapsing = False
        self._resolution: asyncio.Task | None = None

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    @property
    def is_visible(self) -> bool:
        """Whether the popup is shown or within its hide grace period."""
        return self.state in (PopupState.VISIBLE, PopupState.HIDE_GRACE) and not self._collapsing

    # Inbound notifications from the page wiring

    def anchor_enter(self, anchor_rect: Rect, subject: PreviewSubject, viewport: Viewport) -> None:
        """Pointer entered an anchor for ``subject``.

        Resolution only starts when the subject changed or its previous
        resolution never rendered; hovering a loaded subject again reuses the
        displayed content.
        """
        session = self.session
        session.link_hover = True
        session.cancel_hide_timer()
        self._collapsing = False

        self.state = PopupState.SHOWING
        self.surface.attach()

        if session.subject != subject or not session.loaded:
            session.subject = subject
            session.loaded = False
            self.surface.show_loading()
            self._start_resolution(subject)
        else:
            logger.debug("Reusing loaded preview for %s", subject)

        # Measure once the new content has been laid out
        session.cancel_show_debounce()
        session.pending_show_debounce = self.loop.call_soon(self._place, anchor_rect, viewport)
        self.state = PopupState.VISIBLE

    def anchor_leave(self) -> None:
        """Pointer left the anchor."""
        self.session.link_hover = False
        self._schedule_attempt_hide(self.timing.anchor_grace)

    def popup_enter(self) -> None:
        """Pointer entered the popup."""
        self.session.popup_hover = True
        if self._collapsing:
            # Already faded out; an invisible popup does not hold itself open
            self.session.cancel_hide_timer()
            self._collapse()
            return
        self.session.cancel_hide_timer()
        if self.state == PopupState.HIDE_GRACE:
            self.state = PopupState.VISIBLE

    def popup_leave(self) -> None:
        """Pointer left the popup."""
        self.session.popup_hover = False
        self._schedule_attempt_hide(self.timing.popup_grace)

    # Lifecycle

    async def wait_for_render(self) -> None:
        """Wait for the in-flight resolution, if any, to finish or be cancelled."""
        task = self._resolution
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def dispose(self) -> None:
        """Release timers, cancel in-flight work and detach the popup."""
        self.coordinator.cancel()
        self.session.dispose()
        self.surface.detach()
        self._collapsing = False
        self.state = PopupState.HIDDEN

    # Internals

    def _start_resolution(self, subject: PreviewSubject) -> None:
        token = self.coordinator.begin()
        task = self.loop.create_task(self._resolve_and_render(subject, token))
        token.bind(task)
        self._resolution = task

    async def _resolve_and_render(self, subject: PreviewSubject, token: CancellationToken) -> None:
        try:
            result = await self.resolver.resolve(subject, token)
        except Exception:
            logger.exception("Failed to resolve preview for %s", subject)
            result = self.resolver.no_entry(subject)
        if result is None or not self.coordinator.is_live(token):
            return
        if self.session.subject != subject:
            return

        self.surface.render(result)
        self.session.loaded = True
        logger.debug("Rendered %s preview for %s", result.kind.value, subject)

    def _place(self, anchor_rect: Rect, viewport: Viewport) -> None:
        self.session.pending_show_debounce = None
        placement = compute_placement(
            anchor_rect, self.surface.measure(), viewport, self.placement_config
        )
        self.surface.reveal(placement)

    def _schedule_attempt_hide(self, delay: float) -> None:
        if self.state == PopupState.HIDDEN or self._collapsing:
            return
        self.session.cancel_hide_timer()
        self.session.pending_hide_timer = self.loop.call_later(delay, self._attempt_hide)
        self.state = PopupState.HIDE_GRACE

    def _attempt_hide(self) -> None:
        self.session.pending_hide_timer = None
        if self.session.hovered:
            self.state = PopupState.VISIBLE
            return
        self._hide()

    def _hide(self) -> None:
        self.session.cancel_show_debounce()
        self.surface.conceal()
        self._collapsing = True
        self.session.pending_hide_timer = self.loop.call_later(
            self.timing.collapse, self._collapse
        )

    def _collapse(self) -> None:
        self.session.pending_hide_timer = None
        self._collapsing = False
        self.coordinator.cancel()
        # A detached popup never reports a pointer leave
        self.session.reset_occupancy()
        self.session.clear_subject()
        self.surface.detach()
        self.state = PopupState.HIDDEN
