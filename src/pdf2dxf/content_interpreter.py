"""
Content Stream Interpreter Module

Walks the operators of a page or form content stream and turns path
construction into line segments in output coordinates.

Only the operators that move geometry are interpreted:

    q Q cm            graphics state save/restore and matrix concatenation
    m l c v y h re    path construction
    Do                form XObject invocation (recursive)

Everything else (colour, text, clipping, shading, painting operators) has no
effect on the extracted centerlines and is ignored.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .content_parser import ContentStreamParser, Operation
from .exceptions import ResourceResolutionError, StreamDecodeError
from .geometry import (
    DEFAULT_CURVE_SEGMENTS,
    AffineTransform,
    LineSegment,
    Point,
    flatten_cubic,
)
from .pdf_document import ResourceScope, XObjectKind

logger = logging.getLogger(__name__)

# Deepest chain of nested form invocations that is followed
MAX_FORM_DEPTH = 64

# Number of operands each interpreted operator consumes
OPERATOR_ARITY = {
    "q": 0,
    "Q": 0,
    "cm": 6,
    "m": 2,
    "l": 2,
    "c": 6,
    "v": 4,
    "y": 4,
    "h": 0,
    "re": 4,
    "Do": 1,
}


@dataclass
class GraphicsState:
    """The part of the PDF graphics state that affects geometry"""
    ctm: AffineTransform = field(default_factory=AffineTransform.identity)

    def copy(self) -> 'GraphicsState':
        return GraphicsState(self.ctm)


@dataclass
class PathCursor:
    """Current point and start of the current subpath, in output coordinates"""
    current_point: Point = Point(0.0, 0.0)
    subpath_start: Point = Point(0.0, 0.0)

    def move_to(self, point: Point):
        self.current_point = point
        self.subpath_start = point


@dataclass
class _StreamFrame:
    """Per content stream interpreter state"""
    state: GraphicsState
    scope: Optional[ResourceScope]
    depth: int
    stack: List[GraphicsState] = field(default_factory=list)
    cursor: PathCursor = field(default_factory=PathCursor)


class ContentStreamInterpreter:
    """
    Interpret content streams into a shared list of line segments.

    One interpreter serves a whole conversion: every page and every nested
    form appends to the same ``output`` list. The graphics state stack and
    path cursor are fresh for each content stream.

    The ``document`` collaborator must provide ``resolve_xobject(scope, name)``
    and ``read_stream(xref)``, as ``PDFDocument`` does.
    """

    def __init__(self, document, output: Optional[List[LineSegment]] = None,
                 curve_segments: int = DEFAULT_CURVE_SEGMENTS,
                 max_depth: int = MAX_FORM_DEPTH,
                 parser: Optional[ContentStreamParser] = None):
        """
        Initialize interpreter.

        Args:
            document: Resolver for XObjects and stream data
            output: List that receives the line segments (new list if None)
            curve_segments: Line segments per flattened bezier curve
            max_depth: Deepest form nesting that is followed
            parser: Content stream tokenizer (a private one if None)
        """
        if curve_segments < 1:
            raise ValueError(f"curve_segments must be at least 1, got {curve_segments}")

        self.document = document
        self.output = output if output is not None else []
        self.curve_segments = curve_segments
        self.max_depth = max_depth
        self._parser = parser or ContentStreamParser()
        self._owns_parser = parser is None
        self._form_cache: Dict[int, List[Operation]] = {}
        self._active_forms: List[int] = []
        self.failed_streams = 0

    def close(self):
        if self._owns_parser:
            self._parser.close()
        self._form_cache.clear()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def run(self, content: bytes, ctm: AffineTransform,
            scope: Optional[ResourceScope]) -> int:
        """
        Interpret one top-level (page) content stream.

        Args:
            content: Decoded content-stream bytes
            ctm: Base transform, e.g. the page layout offset
            scope: Resource scope the stream's names resolve in

        Returns:
            Number of line segments this stream (and its forms) produced

        Raises:
            StreamDecodeError: if the content cannot be tokenized
        """
        before = len(self.output)
        operations = self._parser.parse(content)
        self._execute(operations, GraphicsState(ctm), scope, depth=0)
        return len(self.output) - before

    def _execute(self, operations: Sequence[Operation], state: GraphicsState,
                 scope: Optional[ResourceScope], depth: int):
        frame = _StreamFrame(state=state, scope=scope, depth=depth)
        for operation in operations:
            arity = OPERATOR_ARITY.get(operation.operator)
            if arity is None:
                continue
            if len(operation.operands) < arity:
                logger.debug("Skipping '%s': expected %d operands, got %d",
                              operation.operator, arity, len(operation.operands))
                continue
            operands = operation.operands[len(operation.operands) - arity:]
            self._dispatch(frame, operation.operator, operands)

    def _dispatch(self, frame: _StreamFrame, op: str, operands: list):
        if op == "q":
            frame.stack.append(frame.state.copy())
            return
        if op == "Q":
            if frame.stack:
                frame.state = frame.stack.pop()
            return
        if op == "h":
            self._emit(frame.cursor.current_point, frame.cursor.subpath_start)
            frame.cursor.current_point = frame.cursor.subpath_start
            return
        if op == "Do":
            if isinstance(operands[0], str):
                self._invoke_xobject(frame, operands[0])
            return

        if not all(isinstance(v, float) for v in operands):
            logger.debug("Skipping '%s' with non-numeric operands %r", op, operands)
            return

        ctm = frame.state.ctm
        cursor = frame.cursor

        if op == "cm":
            frame.state.ctm = ctm.compose(AffineTransform(*operands))

        elif op == "m":
            cursor.move_to(ctm.apply(Point(*operands)))

        elif op == "l":
            point = ctm.apply(Point(*operands))
            self._emit(cursor.current_point, point)
            cursor.current_point = point

        elif op == "c":
            p1, p2, p3 = self._points(ctm, operands)
            self._curve(cursor, cursor.current_point, p1, p2, p3)

        elif op == "v":
            p2, p3 = self._points(ctm, operands)
            self._curve(cursor, cursor.current_point, cursor.current_point, p2, p3)

        elif op == "y":
            p1, p3 = self._points(ctm, operands)
            self._curve(cursor, cursor.current_point, p1, p3, p3)

        elif op == "re":
            x, y, w, h = operands
            lower_left = ctm.apply(Point(x, y))
            lower_right = ctm.apply(Point(x + w, y))
            upper_right = ctm.apply(Point(x + w, y + h))
            upper_left = ctm.apply(Point(x, y + h))

            self._emit(lower_left, lower_right)
            self._emit(lower_right, upper_right)
            self._emit(upper_right, upper_left)
            self._emit(upper_left, lower_left)
            cursor.move_to(lower_left)

    @staticmethod
    def _points(ctm: AffineTransform, operands: list) -> Tuple[Point, ...]:
        return tuple(
            ctm.apply(Point(operands[i], operands[i + 1]))
            for i in range(0, len(operands), 2)
        )

    def _emit(self, start: Point, end: Point):
        self.output.append(LineSegment(start, end))

    def _curve(self, cursor: PathCursor, p0: Point, p1: Point, p2: Point, p3: Point):
        self.output.extend(flatten_cubic(p0, p1, p2, p3, self.curve_segments))
        cursor.current_point = p3

    # ------------------------------------------------------------------
    # Form XObjects
    # ------------------------------------------------------------------

    def _invoke_xobject(self, frame: _StreamFrame, name: str):
        try:
            xobject = self.document.resolve_xobject(frame.scope, name)
        except ResourceResolutionError as e:
            logger.debug("Skipping Do: %s", e)
            return

        if xobject.kind is not XObjectKind.FORM:
            return

        if frame.depth + 1 > self.max_depth:
            logger.warning("Form /%s not drawn: nesting deeper than %d levels",
                           name, self.max_depth)
            return
        if xobject.xref in self._active_forms:
            logger.warning("Form /%s (object %d) invokes itself; skipped",
                           name, xobject.xref)
            return

        operations = self._form_operations(xobject.xref)
        if operations is None:
            return

        form_state = GraphicsState(frame.state.ctm.compose(xobject.matrix))
        self._active_forms.append(xobject.xref)
        try:
            self._execute(operations, form_state, xobject.scope, frame.depth + 1)
        finally:
            self._active_forms.pop()

    def _form_operations(self, xref: int) -> Optional[List[Operation]]:
        """Parsed form content, cached per object; None if undecodable"""
        if xref in self._form_cache:
            return self._form_cache[xref]
        try:
            operations = self._parser.parse(self.document.read_stream(xref))
        except StreamDecodeError as e:
            logger.warning("Form object %d contributes no geometry: %s", xref, e)
            self.failed_streams += 1
            operations = None
        self._form_cache[xref] = operations
        return operations
