"""
Content Stream Parser Module

Splits decoded content-stream bytes into operators and their operands with
pikepdf. Numbers come back as floats and names as plain strings without the
leading slash, so the interpreter never sees pikepdf objects.
"""

import logging
from decimal import Decimal
from typing import Any, List, NamedTuple

import pikepdf

from .exceptions import StreamDecodeError

logger = logging.getLogger(__name__)


class Operation(NamedTuple):
    """One content-stream instruction"""
    operator: str
    operands: List[Any]


def _convert_operand(operand: Any) -> Any:
    if isinstance(operand, bool):
        return operand
    if isinstance(operand, (int, float, Decimal)):
        return float(operand)
    if isinstance(operand, pikepdf.Name):
        return str(operand)[1:]
    return operand


class ContentStreamParser:
    """
    Tokenizer for content streams.

    pikepdf parses streams that belong to a PDF, so the parser keeps an empty
    scratch document to attach the bytes to. Close it when done, or use the
    parser as a context manager.
    """

    def __init__(self):
        self._scratch = pikepdf.new()

    def parse(self, content: bytes) -> List[Operation]:
        """
        Tokenize content-stream bytes.

        Raises:
            StreamDecodeError: if the bytes are not a parseable content stream
        """
        if not content.strip():
            return []

        try:
            stream = pikepdf.Stream(self._scratch, content)
            return [
                Operation(
                    str(instruction.operator),
                    [_convert_operand(operand) for operand in instruction.operands],
                )
                for instruction in pikepdf.parse_content_stream(stream)
            ]
        except (pikepdf.PdfError, ValueError) as e:
            # UnicodeDecodeError (a ValueError) comes from non-UTF-8 operator or name bytes
            raise StreamDecodeError(f"Cannot parse content stream: {e}") from e

    def close(self):
        if self._scratch is not None:
            self._scratch.close()
            self._scratch = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
