"""PageRenderer: the per-page-load state machine.

``idle -> loading -> rendered | failed``. Both outcomes are terminal: there
is no retry and no re-entry, a fresh PageRenderer (a page reload) is the only
recovery path. The pass suspends only while the source fetches and decodes
the record; binding then runs to completion without yielding.

No timeout is applied here. A hung source leaves the page in ``loading``;
callers wanting a bound wrap :meth:`PageRenderer.run` (or configure one on
the HTTP client they inject).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from viewbind.domain.types import RenderState
from viewbind.errors import RecordLoadError, RenderStateError
from viewbind.services.telemetry import inject_meta, root_span, trace_span

if TYPE_CHECKING:
    from viewbind.infrastructure.source import RecordSource
    from viewbind.infrastructure.view import SlotResolver
    from viewbind.services.binder import Binder
    from viewbind.services.result import RenderResult

logger = logging.getLogger(__name__)


class PageRenderer:
    """Drives one fetch and one render pass into a view."""

    def __init__(self, source: RecordSource, binder: Binder, view: SlotResolver) -> None:
        self.source = source
        self.binder = binder
        self.view = view
        self.state = RenderState.IDLE

    async def run(self) -> RenderResult:
        """Load the record and render it, or take the single error path.

        Raises:
            RenderStateError: If this page has already left ``idle``.
        """
        if self.state is not RenderState.IDLE:
            msg = f"Page already {self.state}; reload to render again"
            raise RenderStateError(msg)

        with root_span("page.render") as span:
            self.state = RenderState.LOADING
            self.binder.write_status(self.view, self.binder.spec.loading_status)
            try:
                with trace_span("fetch"):
                    record = await self.source.fetch()
            except RecordLoadError as exc:
                self.state = RenderState.FAILED
                result = self.binder.render_failure(exc, self.view)
            else:
                result = self.binder.render(record, self.view)
                self.state = RenderState.RENDERED
                logger.debug("Record from %s rendered", self.source.location)
            if span is not None:
                span.annotate("state", str(self.state))
                span.annotate("source", self.source.location)

        if span is not None:
            result = inject_meta(result, span)
        return result
