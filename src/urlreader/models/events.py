"""Event types emitted while a URL moves through the reader pipeline."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional

from .content import ContentKind


class EventType(str, Enum):
    """Types of events emitted during a conversion."""

    STARTED = "started"
    URL_RESOLVED = "url_resolved"
    PDF_DETECTED = "pdf_detected"
    BROWSER_RENDER_STARTED = "browser_render_started"
    CONTENT_ACQUIRED = "content_acquired"
    EXTRACTION_SKIPPED = "extraction_skipped"
    CONVERTED = "converted"
    FAILED = "failed"


@dataclass
class ReaderEvent:
    """
    Event emitted during a conversion.

    Example:
        def log_event(event: ReaderEvent) -> None:
            if event.type == EventType.PDF_DETECTED:
                print(f"PDF: {event.url}")

        await pipeline.run(raw_url, emit=log_event)
    """

    type: EventType

    # Timestamp (always UTC)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    url: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    content_kind: Optional[ContentKind] = None

    @property
    def is_error(self) -> bool:
        """Check if this is an error event."""
        return self.type == EventType.FAILED


# Type alias for event emitter function
EventEmitter = Callable[[ReaderEvent], None]
