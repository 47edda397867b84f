from __future__ import annotations

from typing import Awaitable, Optional, Tuple


class IngestError(Exception):
    """Root of every error raised by the document ingest pipeline."""


class StorageFetchError(IngestError):
    """The document bytes could not be fetched from any storage location."""


class ExtractionError(IngestError):
    """An extractor could not produce text.

    ``user_message`` is safe to show inside a failure template. ``terminal``
    stops a fallback chain because every later stage would reject the same
    bytes.
    """

    user_message = "Text extraction encountered an issue."
    terminal = False


class InvalidFormat(ExtractionError):
    user_message = "The file does not appear to be a valid document of its declared type."
    terminal = True


class RemoteServiceError(ExtractionError):
    user_message = "The online text recognition service could not read this document."

    def __init__(self, message: str, category: str = "service_error") -> None:
        super().__init__(message)
        self.category = category

    def __reduce__(self):
        return (self.__class__, (str(self), self.category))


class WorkerLoadError(ExtractionError):
    user_message = "The background document reader could not be started."


class RenderError(ExtractionError):
    user_message = "The document appears to be damaged and could not be opened."


class NoExtractableText(ExtractionError):
    user_message = (
        "No readable text was found. The document may be scanned images, "
        "password protected, or empty."
    )


class UnpackError(ExtractionError):
    user_message = "The document could not be unpacked."


async def capture(pending: Awaitable[str]) -> Tuple[str, Optional[ExtractionError]]:
    """Await an extraction and return ``(text, error)`` instead of raising."""
    try:
        return await pending, None
    except ExtractionError as exc:
        return "", exc
