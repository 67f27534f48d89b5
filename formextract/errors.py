"""Exceptions raised by the extraction pipeline."""


class ExtractionError(Exception):
    """Base exception for extraction failures."""
    pass


class OcrError(ExtractionError):
    """The optical fallback could not produce fields."""
    pass


class OcrUnavailableError(OcrError):
    """The recognition engine failed to initialise."""
    pass


class OcrFailedError(OcrError):
    """Rasterization or recognition failed on a page."""

    def __init__(self, page_index: int, message: str):
        super().__init__(f"Page {page_index + 1}: {message}")
        self.page_index = page_index


class NoFieldsDetectedError(ExtractionError):
    """Neither the annotation path nor the optical path produced fields."""
    pass
