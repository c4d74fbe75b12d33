"""Cancellable page rendering and thumbnail generation.

Rendering is cooperative: every rasterization runs in a callback posted to
the Qt event loop, so the UI thread stays the only thread touching PyMuPDF.
Each render target owns at most one live ``RenderSession``; starting a new one
cancels the previous session so a stale page can never be painted over the
current one.
"""

from __future__ import annotations

from collections import OrderedDict
import logging
from typing import Callable, Protocol

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtGui import QImage

from signly.model.document import PdfDocument, PdfPage
from signly.model.geometry import Viewport
from signly.pdf.renderer import PdfRenderError, render_page_image

logger = logging.getLogger(__name__)

PURPOSE_PAGE = "page"
PURPOSE_THUMBNAIL = "thumbnail"

Scheduler = Callable[[Callable[[], None]], None]
Rasterizer = Callable[[PdfPage, float], QImage]
CacheKey = tuple[int, float, str]


def post_to_event_loop(callback: Callable[[], None]) -> None:
    QTimer.singleShot(0, callback)


class RenderTarget(Protocol):
    def paint(self, image: QImage, session: RenderSession) -> None: ...


class RenderSession:
    """One in-flight request to rasterize *page* at *scale* onto *target*."""

    def __init__(self, target: RenderTarget, page: int, scale: float, generation: int) -> None:
        self.target = target
        self.page = page
        self.scale = scale
        self.generation = generation
        self.cancelled = False
        self.completed = False

    @property
    def is_live(self) -> bool:
        return not (self.cancelled or self.completed)

    def cancel(self) -> None:
        if not self.completed:
            self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "done" if self.completed else "live"
        return f"RenderSession(page={self.page}, scale={self.scale}, {state})"


class ThumbnailJob:
    def __init__(self, scale: float, page_count: int, generation: int) -> None:
        self.scale = scale
        self.page_count = page_count
        self.generation = generation
        self.images: dict[int, QImage] = {}
        self.failed_pages: list[int] = []
        self.cancelled = False
        self.finished = False

    def cancel(self) -> None:
        self.cancelled = True

    def thumbnails(self) -> list[QImage | None]:
        return [self.images.get(page) for page in range(1, self.page_count + 1)]


class PageRenderCache(QObject):
    thumbnail_ready = Signal(int, object)
    thumbnails_finished = Signal(object)

    def __init__(
        self,
        rasterize: Rasterizer = render_page_image,
        schedule: Scheduler = post_to_event_loop,
        max_pages: int = 12,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._rasterize = rasterize
        self._schedule = schedule
        self._max_pages = max(1, max_pages)
        self._document: PdfDocument | None = None
        self._generation = 0
        self._sessions: dict[RenderTarget, RenderSession] = {}
        self._pages: OrderedDict[CacheKey, QImage] = OrderedDict()
        self._thumbnails: dict[CacheKey, QImage] = {}
        self._thumbnail_job: ThumbnailJob | None = None

    @property
    def document(self) -> PdfDocument | None:
        return self._document

    def set_document(self, document: PdfDocument | None) -> None:
        for session in self._sessions.values():
            session.cancel()
        self._sessions.clear()
        if self._thumbnail_job is not None:
            self._thumbnail_job.cancel()
            self._thumbnail_job = None
        self._pages.clear()
        self._thumbnails.clear()
        self._generation += 1
        self._document = document

    def session_for(self, target: RenderTarget) -> RenderSession | None:
        return self._sessions.get(target)

    def cached_image(self, page: int, scale: float, purpose: str = PURPOSE_PAGE) -> QImage | None:
        key = (page, scale, purpose)
        if purpose == PURPOSE_THUMBNAIL:
            return self._thumbnails.get(key)
        return self._pages.get(key)

    def cancel_target(self, target: RenderTarget) -> None:
        session = self._sessions.pop(target, None)
        if session is not None:
            session.cancel()

    def render_page(self, target: RenderTarget, page: int, scale: float) -> Viewport | None:
        """Return the viewport for *page* and schedule its paint onto *target*."""
        self.cancel_target(target)
        if self._document is None:
            return None

        try:
            viewport = self._document.page(page).viewport(scale)
        except (IndexError, ValueError, RuntimeError) as exc:
            logger.warning("Cannot prepare page %d: %s", page, exc)
            return None

        session = RenderSession(target, page, scale, self._generation)
        self._sessions[target] = session
        self._schedule(lambda: self._run_session(session))
        return viewport

    def render_thumbnails(self, scale: float) -> ThumbnailJob | None:
        if self._document is None:
            return None

        job = self._thumbnail_job
        if job is not None and not job.cancelled and job.scale == scale:
            return job
        if job is not None:
            job.cancel()

        job = ThumbnailJob(scale, self._document.page_count, self._generation)
        self._thumbnail_job = job
        self._schedule(lambda: self._render_thumbnail(job, 1))
        return job

    def _run_session(self, session: RenderSession) -> None:
        if not self._is_current(session):
            logger.debug("Skipping stale %r", session)
            return

        try:
            image = self._image_for(session.page, session.scale, PURPOSE_PAGE)
        except PdfRenderError as exc:
            logger.warning("Render failed for page %d: %s", session.page, exc)
            session.completed = True
            self._sessions.pop(session.target, None)
            return

        if not self._is_current(session):
            logger.debug("Discarding late result of %r", session)
            return

        session.completed = True
        self._sessions.pop(session.target, None)
        session.target.paint(image, session)

    def _is_current(self, session: RenderSession) -> bool:
        return (
            session.is_live
            and session.generation == self._generation
            and self._sessions.get(session.target) is session
        )

    def _render_thumbnail(self, job: ThumbnailJob, page: int) -> None:
        if job.cancelled or job.generation != self._generation:
            logger.debug("Abandoning thumbnail generation at page %d", page)
            return

        try:
            image = self._image_for(page, job.scale, PURPOSE_THUMBNAIL)
        except PdfRenderError as exc:
            logger.warning("Thumbnail failed for page %d: %s", page, exc)
            job.failed_pages.append(page)
        else:
            if job.cancelled or job.generation != self._generation:
                return
            job.images[page] = image
            self.thumbnail_ready.emit(page, image)

        if page < job.page_count:
            self._schedule(lambda: self._render_thumbnail(job, page + 1))
            return
        job.finished = True
        self.thumbnails_finished.emit(job.thumbnails())

    def _image_for(self, page: int, scale: float, purpose: str) -> QImage:
        key = (page, scale, purpose)
        cache = self._thumbnails if purpose == PURPOSE_THUMBNAIL else self._pages
        image = cache.get(key)
        if image is not None:
            if purpose == PURPOSE_PAGE:
                self._pages.move_to_end(key)
            return image

        try:
            image = self._rasterize(self._document.page(page), scale)
        except PdfRenderError:
            raise
        except (IndexError, ValueError, RuntimeError) as exc:
            raise PdfRenderError(f"Failed to render page {page}") from exc

        cache[key] = image
        if purpose == PURPOSE_PAGE:
            while len(self._pages) > self._max_pages:
                self._pages.popitem(last=False)
        return image
