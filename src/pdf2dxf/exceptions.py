"""
Custom exceptions for pdf2dxf.

DocumentLoadError, EmptyResultError and SerializationError end a conversion.
StreamDecodeError and ResourceResolutionError are raised by the document
backend and recovered by the interpreter, which drops only the affected
stream or ``Do`` operator.
"""


class PDF2DXFError(Exception):
    """Base exception for all pdf2dxf errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def default_message(self) -> str:
        return "An unknown conversion error occurred."


class DocumentLoadError(PDF2DXFError):
    """Raised when the input cannot be opened as a PDF document at all."""

    @property
    def default_message(self) -> str:
        return "The file could not be read as a PDF document."


class InputFileNotFoundError(DocumentLoadError):
    """Raised when the input path does not exist."""

    @property
    def default_message(self) -> str:
        return "Input file not found."


class StreamDecodeError(PDF2DXFError):
    """Raised when a single content stream cannot be decompressed or tokenized."""

    @property
    def default_message(self) -> str:
        return "A content stream could not be decoded."


class ResourceResolutionError(PDF2DXFError):
    """Raised when a named XObject is missing from the current resource scope."""

    @property
    def default_message(self) -> str:
        return "A named resource could not be resolved."


class EmptyResultError(PDF2DXFError):
    """Raised when a conversion produced no non-degenerate line segments."""

    @property
    def default_message(self) -> str:
        return "No vector graphics found in the PDF."


class SerializationError(PDF2DXFError):
    """Raised when the DXF drawing cannot be written."""

    @property
    def default_message(self) -> str:
        return "The DXF drawing could not be written."
