"""
PDF Document Module

Read-only access to the parts of a PDF the converter needs, using PyMuPDF:
the page list with media boxes and resource scopes, named XObject resolution,
stream decoding and enumeration of the object table.

PyMuPDF reports dictionary values as ``(type, text)`` pairs from
``Document.xref_get_key``; the helpers below turn those into Python values.
"""

import fitz  # PyMuPDF
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple

from .exceptions import DocumentLoadError, ResourceResolutionError, StreamDecodeError
from .geometry import AffineTransform

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"/([^\s/\[\]<>(){}%]+)")


class XObjectKind(Enum):
    """Kinds of external objects, taken from the /Subtype entry"""
    FORM = "Form"
    IMAGE = "Image"
    OTHER = "Other"


@dataclass(frozen=True)
class ResourceScope:
    """
    Location of the /Resources dictionary that names in a content stream
    are resolved against.

    A scope never falls back to another one: a form XObject that declares
    its own /Resources replaces the scope of the stream that invoked it.
    """
    owner_xref: int
    key: str = "Resources"

    def path(self, category: str, name: str) -> str:
        return f"{self.key}/{category}/{name}"


@dataclass(frozen=True)
class XObject:
    """A resolved XObject reference"""
    name: str
    kind: XObjectKind
    xref: int
    matrix: AffineTransform = AffineTransform()
    scope: Optional[ResourceScope] = None


@dataclass(frozen=True)
class PageInfo:
    """Layout-relevant facts about one page"""
    number: int               # 0-indexed
    xref: int
    width: Optional[float]    # None when the media box is missing or malformed
    scope: Optional[ResourceScope]


def _ref_to_xref(value: str) -> int:
    """Turn an indirect reference like '12 0 R' into its object number"""
    return int(value.split()[0])


def _parse_numbers(value: str) -> List[float]:
    """Parse a PDF array of numbers such as '[0 0 612 792]'"""
    return [float(token) for token in value.strip().strip("[]").split()]


def _parse_names(value: str) -> List[str]:
    """Parse a PDF name or array of names into bare names"""
    return _NAME_RE.findall(value)


def _decode_errors(messages: str) -> List[str]:
    """Error lines among the messages MuPDF collected"""
    return [line for line in messages.splitlines() if "error" in line.lower()]


class PDFDocument:
    """
    Open PDF document.

    Usage:
        with PDFDocument("drawing.pdf") as document:
            for page in document.iter_pages():
                content = document.page_content(page)
    """

    # Guard against cyclic /Parent chains in broken page trees
    MAX_INHERITANCE_DEPTH = 32

    def __init__(self, pdf_path: str):
        """
        Initialize document with PDF file path.

        Args:
            pdf_path: Path to the PDF file
        """
        self.pdf_path = pdf_path
        self.doc = None

    def open(self):
        """
        Open the PDF document.

        Raises:
            DocumentLoadError: if the file cannot be parsed as a PDF
        """
        try:
            doc = fitz.open(self.pdf_path)
        except Exception as e:
            raise DocumentLoadError(f"Cannot open {self.pdf_path}: {e}") from e

        if not doc.is_pdf:
            doc.close()
            raise DocumentLoadError(f"{self.pdf_path} is not a PDF document")

        if doc.needs_pass and not doc.authenticate(""):
            doc.close()
            raise DocumentLoadError(f"{self.pdf_path} is encrypted")

        self.doc = doc

    def close(self):
        """Close the PDF document"""
        if self.doc:
            self.doc.close()
            self.doc = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def page_count(self) -> int:
        """Return number of pages in PDF"""
        if self.doc:
            return len(self.doc)
        return 0

    # ------------------------------------------------------------------
    # Low level dictionary access
    # ------------------------------------------------------------------

    def get_key(self, xref: int, key: str) -> Tuple[str, str]:
        """Return PyMuPDF's (type, value) pair, ('null', 'null') if unreadable"""
        try:
            return self.doc.xref_get_key(xref, key)
        except ValueError:
            return ("null", "null")

    def _deref(self, kind: str, value: str) -> str:
        """Replace an indirect reference by the source of the referenced object"""
        if kind == "xref":
            return self.doc.xref_object(_ref_to_xref(value), compressed=True).strip()
        return value

    def get_name(self, xref: int, key: str) -> Optional[str]:
        """Return a name value without its leading slash"""
        kind, value = self.get_key(xref, key)
        names = _parse_names(self._deref(kind, value)) if kind in ("name", "xref") else []
        return names[0] if names else None

    def get_names(self, xref: int, key: str) -> List[str]:
        """Return a name or array of names, e.g. the /Filter entry"""
        kind, value = self.get_key(xref, key)
        if kind not in ("name", "array", "xref"):
            return []
        return _parse_names(self._deref(kind, value))

    def get_number(self, xref: int, key: str) -> Optional[float]:
        kind, value = self.get_key(xref, key)
        if kind not in ("int", "float", "xref"):
            return None
        try:
            return float(self._deref(kind, value))
        except ValueError:
            return None

    def get_numbers(self, xref: int, key: str) -> Optional[List[float]]:
        kind, value = self.get_key(xref, key)
        if kind not in ("array", "xref"):
            return None
        try:
            return _parse_numbers(self._deref(kind, value))
        except ValueError:
            return None

    def _inheritance_chain(self, xref: int) -> Iterator[int]:
        """Yield a page node followed by its ancestors in the page tree"""
        seen = set()
        while xref and xref not in seen and len(seen) < self.MAX_INHERITANCE_DEPTH:
            seen.add(xref)
            yield xref
            kind, value = self.get_key(xref, "Parent")
            xref = _ref_to_xref(value) if kind == "xref" else 0

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    def _page_width(self, page_xref: int) -> Optional[float]:
        """Width of the (possibly inherited) /MediaBox"""
        for node in self._inheritance_chain(page_xref):
            if self.get_key(node, "MediaBox")[0] == "null":
                continue
            box = self.get_numbers(node, "MediaBox")
            if box is None or len(box) < 4:
                logger.debug("Malformed /MediaBox on object %d", node)
                return None
            return abs(box[2] - box[0])
        return None

    def _page_scope(self, page_xref: int) -> Optional[ResourceScope]:
        """Scope of the (possibly inherited) page /Resources"""
        for node in self._inheritance_chain(page_xref):
            if self.get_key(node, "Resources")[0] != "null":
                return ResourceScope(node)
        return None

    def iter_pages(self, pages: Optional[Sequence[int]] = None) -> Iterator[PageInfo]:
        """
        Iterate over pages in document order.

        Args:
            pages: Optional 0-indexed page numbers; out of range numbers are ignored
        """
        if pages is None:
            numbers = range(self.page_count)
        else:
            numbers = [p for p in pages if 0 <= p < self.page_count]

        for number in numbers:
            page_xref = self.doc.page_xref(number)
            yield PageInfo(
                number=number,
                xref=page_xref,
                width=self._page_width(page_xref),
                scope=self._page_scope(page_xref),
            )

    def page_content(self, page: PageInfo) -> bytes:
        """
        Return the decoded content of a page, all content streams joined.

        Raises:
            StreamDecodeError: if any content stream cannot be decoded
        """
        try:
            content_xrefs = self.doc[page.number].get_contents()
        except Exception as e:
            raise StreamDecodeError(f"Cannot read contents of page {page.number + 1}: {e}") from e
        return b"\n".join(self.read_stream(xref) for xref in content_xrefs)

    # ------------------------------------------------------------------
    # Streams and XObjects
    # ------------------------------------------------------------------

    def read_stream(self, xref: int) -> bytes:
        """
        Return the decompressed data of a stream object.

        MuPDF reports broken filter data (a bad zlib header, say) as a message
        and returns whatever it managed to decode; such streams are treated
        as undecodable.

        Raises:
            StreamDecodeError: if the stream is missing or cannot be decoded
        """
        fitz.TOOLS.reset_mupdf_warnings()
        try:
            data = self.doc.xref_stream(xref)
        except Exception as e:
            raise StreamDecodeError(f"Cannot decode stream {xref}: {e}") from e
        if data is None:
            raise StreamDecodeError(f"Object {xref} is not a stream")

        errors = _decode_errors(fitz.TOOLS.mupdf_warnings())
        if errors:
            raise StreamDecodeError(f"Cannot decode stream {xref}: {errors[-1]}")
        return data

    def read_raw_stream(self, xref: int) -> bytes:
        """Return stream data exactly as stored in the file"""
        try:
            data = self.doc.xref_stream_raw(xref)
        except Exception as e:
            raise StreamDecodeError(f"Cannot read stream {xref}: {e}") from e
        if data is None:
            raise StreamDecodeError(f"Object {xref} is not a stream")
        return data

    def iter_stream_xrefs(self) -> Iterator[int]:
        """Yield the number of every stream object in the object table"""
        for xref in range(1, self.doc.xref_length()):
            if self.doc.xref_is_stream(xref):
                yield xref

    def resolve_xobject(self, scope: Optional[ResourceScope], name: str) -> XObject:
        """
        Look up a named XObject in a resource scope and classify it.

        For form XObjects the declared /Matrix (identity if absent) and the
        scope to interpret the form with are resolved as well.

        Raises:
            ResourceResolutionError: if the name is not bound to a stream
        """
        if scope is None:
            raise ResourceResolutionError(f"No resources to resolve /{name}")

        kind, value = self.get_key(scope.owner_xref, scope.path("XObject", name))
        if kind != "xref":
            raise ResourceResolutionError(f"XObject /{name} not found in object {scope.owner_xref}")

        xref = _ref_to_xref(value)
        if not self.doc.xref_is_stream(xref):
            raise ResourceResolutionError(f"XObject /{name} (object {xref}) is not a stream")

        subtype = self.get_name(xref, "Subtype")
        if subtype == XObjectKind.FORM.value:
            return XObject(
                name=name,
                kind=XObjectKind.FORM,
                xref=xref,
                matrix=self._form_matrix(xref),
                scope=self._form_scope(xref, scope),
            )
        if subtype == XObjectKind.IMAGE.value:
            return XObject(name=name, kind=XObjectKind.IMAGE, xref=xref)
        return XObject(name=name, kind=XObjectKind.OTHER, xref=xref)

    def _form_matrix(self, xref: int) -> AffineTransform:
        values = self.get_numbers(xref, "Matrix")
        if values is None:
            return AffineTransform.identity()
        if len(values) != 6:
            logger.debug("Ignoring malformed /Matrix on form %d", xref)
            return AffineTransform.identity()
        return AffineTransform.from_values(values)

    def _form_scope(self, xref: int, inherited: ResourceScope) -> ResourceScope:
        if self.get_key(xref, "Resources")[0] == "null":
            return inherited
        return ResourceScope(xref)
