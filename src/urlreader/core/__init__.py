"""Core reader pipeline."""

from .acquirer import PDF_MEDIA_TYPE, ContentAcquirer, PageRenderer
from .pipeline import Reader, ReaderPipeline, convert_blocking, ensure_trailing_newline

__all__ = [
    "ContentAcquirer",
    "PDF_MEDIA_TYPE",
    "PageRenderer",
    "Reader",
    "ReaderPipeline",
    "convert_blocking",
    "ensure_trailing_newline",
]
