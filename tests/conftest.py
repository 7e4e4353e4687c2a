from __future__ import annotations

import zlib
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

import pytest


def _pdf_array(values: Sequence[float]) -> bytes:
    return ("[" + " ".join(str(v) for v in values) + "]").encode()


class PDFBuilder:
    """Writes small uncompressed PDFs with a valid cross-reference table.

    Object 1 is the catalog and object 2 the page tree root; everything
    else is numbered in the order it is added.
    """

    def __init__(self, pages_entries: bytes = b"") -> None:
        self.objects: Dict[int, bytes] = {}
        self.page_numbers: List[int] = []
        self.pages_entries = pages_entries
        self._next = 3

    def reserve(self) -> int:
        num = self._next
        self._next += 1
        return num

    def add_object(self, body: bytes, num: Optional[int] = None) -> int:
        num = num if num is not None else self.reserve()
        self.objects[num] = body
        return num

    def add_stream(self, data: bytes, entries: bytes = b"", num: Optional[int] = None) -> int:
        body = b"<< /Length %d %s >>\nstream\n" % (len(data), entries) + data + b"\nendstream"
        return self.add_object(body, num)

    def add_form(self, content: bytes, matrix: Optional[Sequence[float]] = None,
                 resources: Optional[bytes] = None, num: Optional[int] = None) -> int:
        entries = b"/Type /XObject /Subtype /Form /BBox [-10000 -10000 10000 10000]"
        if matrix is not None:
            entries += b" /Matrix " + _pdf_array(matrix)
        if resources is not None:
            entries += b" /Resources " + resources
        return self.add_stream(content, entries, num)

    def add_image(self, data: bytes, width: int, height: int, bpc: int = 8,
                  color_space: Optional[str] = "DeviceRGB",
                  filter_name: Optional[str] = "FlateDecode") -> int:
        entries = b"/Type /XObject /Subtype /Image /Width %d /Height %d /BitsPerComponent %d" % (
            width, height, bpc)
        if color_space:
            entries += b" /ColorSpace /" + color_space.encode()
        if filter_name == "FlateDecode":
            data = zlib.compress(data)
        if filter_name:
            entries += b" /Filter /" + filter_name.encode()
        return self.add_stream(data, entries)

    def add_page(self, content: bytes,
                 mediabox: Optional[Sequence[float]] = (0, 0, 612, 792),
                 resources: Optional[bytes] = b"<< >>",
                 content_entries: bytes = b"") -> int:
        content_num = self.add_stream(content, content_entries)
        entries = b"/Type /Page /Parent 2 0 R /Contents %d 0 R" % content_num
        if mediabox is not None:
            entries += b" /MediaBox " + _pdf_array(mediabox)
        if resources is not None:
            entries += b" /Resources " + resources
        num = self.add_object(b"<< " + entries + b" >>")
        self.page_numbers.append(num)
        return num

    def to_bytes(self) -> bytes:
        objects = dict(self.objects)
        objects[1] = b"<< /Type /Catalog /Pages 2 0 R >>"
        kids = b" ".join(b"%d 0 R" % n for n in self.page_numbers)
        objects[2] = b"<< /Type /Pages /Kids [%s] /Count %d %s >>" % (
            kids, len(self.page_numbers), self.pages_entries)

        out = bytearray(b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n")
        offsets = {}
        for num in sorted(objects):
            offsets[num] = len(out)
            out += b"%d 0 obj\n" % num + objects[num] + b"\nendobj\n"

        size = max(objects) + 1
        xref_pos = len(out)
        out += b"xref\n0 %d\n" % size
        out += b"0000000000 65535 f \n"
        for num in range(1, size):
            if num in offsets:
                out += b"%010d 00000 n \n" % offsets[num]
            else:
                out += b"0000000000 65535 f \n"
        out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_pos)
        return bytes(out)

    def save(self, path: Path) -> Path:
        path.write_bytes(self.to_bytes())
        return path


@pytest.fixture()
def pdf_builder() -> Callable[..., PDFBuilder]:
    return PDFBuilder


@pytest.fixture()
def simple_pdf(tmp_path: Path) -> Path:
    """One page: identity cm, an open triangle closed with h."""
    builder = PDFBuilder()
    builder.add_page(b"1 0 0 1 0 0 cm 0 0 m 10 0 l 10 10 l h")
    return builder.save(tmp_path / "simple.pdf")
