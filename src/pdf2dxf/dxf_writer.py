"""
DXF Writer Module

Creates DXF files from extracted line segments using the ezdxf library.
Coordinates arrive in PDF points and are converted to the drawing unit
chosen by the user, multiplied by the user's scale factor.
"""

import logging
from typing import Dict, Iterable, List, Tuple

import ezdxf
from ezdxf import units
from ezdxf.lldxf.const import DXFError

from .exceptions import SerializationError
from .geometry import DEGENERACY_EPSILON, LineSegment

logger = logging.getLogger(__name__)

DEFAULT_UNIT = "mm"
DEFAULT_DXF_VERSION = "R2010"
DEFAULT_LAYER = "0"

# Drawing unit -> (size of one PDF point in that unit, DXF $INSUNITS code)
UNIT_MAP: Dict[str, Tuple[float, int]] = {
    "mm": (25.4 / 72.0, units.MM),
    "cm": (2.54 / 72.0, units.CM),
    "m": (0.0254 / 72.0, units.M),
    "in": (1.0 / 72.0, units.IN),
    "ft": (1.0 / 864.0, units.FT),
}


def unit_factor(unit: str) -> float:
    """
    Return the size of one PDF point in the given drawing unit.

    Raises:
        ValueError: for an unknown unit label
    """
    try:
        return UNIT_MAP[unit.lower()][0]
    except KeyError:
        raise ValueError(f"Unknown unit '{unit}'. Valid units: {sorted(UNIT_MAP)}")


class GeometryDocumentBuilder:
    """
    Collect line segments and prepare them for the DXF writer.

    Segments whose endpoints coincide within ``epsilon`` on both axes are
    dropped (measured in PDF points, before scaling); the rest are scaled by
    ``scale_factor`` times the point-to-unit factor.
    """

    def __init__(self, scale_factor: float = 1.0, unit: str = DEFAULT_UNIT,
                 epsilon: float = DEGENERACY_EPSILON):
        if scale_factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {scale_factor}")
        self.unit = unit.lower()
        self.scale_factor = scale_factor
        self.final_scale = scale_factor * unit_factor(unit)
        self.epsilon = epsilon
        self.lines: List[LineSegment] = []
        self.dropped = 0

    def add_lines(self, segments: Iterable[LineSegment]):
        for segment in segments:
            if segment.is_degenerate(self.epsilon):
                self.dropped += 1
                continue
            self.lines.append(segment.scaled(self.final_scale))

    def build(self) -> List[LineSegment]:
        """Return the scaled, non-degenerate segments in insertion order"""
        if self.dropped:
            logger.debug("Dropped %d degenerate segments", self.dropped)
        return self.lines


class DXFWriter:
    """
    Write line segments to DXF format.

    Every segment becomes a LINE entity on a single layer. Supported DXF
    versions: R12, R2000, R2004, R2007, R2010, R2013, R2018.
    """

    VERSIONS = ("R12", "R2000", "R2004", "R2007", "R2010", "R2013", "R2018")

    def __init__(self, version: str = DEFAULT_DXF_VERSION, unit: str = DEFAULT_UNIT,
                 layer: str = DEFAULT_LAYER):
        """
        Initialize DXF writer.

        Args:
            version: DXF version
            unit: Drawing unit label, recorded in the $INSUNITS header (R2000+)
            layer: Layer that receives all entities
        """
        if version not in self.VERSIONS:
            raise ValueError(f"Unsupported DXF version '{version}'. Valid: {self.VERSIONS}")
        unit_factor(unit)
        self.version = version
        self.unit = unit.lower()
        self.layer = layer
        self.doc = None
        self.msp = None

    def create_document(self, lines: Iterable[LineSegment]) -> 'ezdxf.document.Drawing':
        """
        Create a new DXF document containing the given segments.

        Returns:
            ezdxf Drawing object
        """
        self.doc = ezdxf.new(self.version)
        if self.version != "R12":
            self.doc.units = UNIT_MAP[self.unit][1]

        if self.layer not in self.doc.layers:
            self.doc.layers.add(self.layer)

        self.msp = self.doc.modelspace()
        attribs = {"layer": self.layer}
        for line in lines:
            self.msp.add_line(
                start=(line.start.x, line.start.y),
                end=(line.end.x, line.end.y),
                dxfattribs=attribs,
            )
        return self.doc

    def save(self, filepath: str):
        """
        Save the DXF document to file.

        Raises:
            SerializationError: if the file cannot be written
        """
        if self.doc is None:
            raise SerializationError("No DXF document has been created")
        try:
            self.doc.saveas(filepath, encoding="utf-8")
        except (OSError, DXFError) as e:
            raise SerializationError(f"Failed to write DXF file {filepath}: {e}") from e


def create_dxf_from_lines(lines: Iterable[LineSegment], output_path: str,
                          version: str = DEFAULT_DXF_VERSION,
                          unit: str = DEFAULT_UNIT) -> str:
    """
    Convenience function to create a DXF file from ready-to-write segments.

    Returns:
        Path to created DXF file
    """
    writer = DXFWriter(version, unit)
    writer.create_document(lines)
    writer.save(output_path)
    return output_path
