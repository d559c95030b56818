"""Binary serialization of a Raster.

All integers are big-endian.  Layout::

    width:u32 height:u32
    areaCount:u32 (id:str area:f64)*
    width*height cells, row-major:
        containingCount:u32 id:str*
        partialCount:u32 (id:str outer:rings inner:rings)*
    rings  = ringCount:u32 (pointCount:u32 (x:i32 y:i32)*)*
    str    = byteLength:u16 utf-8 bytes
"""

import logging
import pathlib
import struct
from typing import BinaryIO, Union

from .models import CellResult, Raster, RegionArea

logger = logging.getLogger(__name__)

_U16 = struct.Struct('>H')
_U32 = struct.Struct('>I')
_F64 = struct.Struct('>d')
_POINT = struct.Struct('>ii')


# ── Writing ─────────────────────────────────────────────────────────────

def _write_str(out: BinaryIO, value: str) -> None:
    data = value.encode('utf-8')
    if len(data) > 0xFFFF:
        raise ValueError(f"String too long to serialize: {value[:32]}...")
    out.write(_U16.pack(len(data)))
    out.write(data)


def _write_rings(out: BinaryIO, rings) -> None:
    out.write(_U32.pack(len(rings)))
    for ring in rings:
        out.write(_U32.pack(len(ring)))
        out.write(b''.join(_POINT.pack(x, y) for x, y in ring))


def _write_cell(out: BinaryIO, cell: CellResult) -> None:
    out.write(_U32.pack(len(cell.containing_ids)))
    for region_id in cell.containing_ids:
        _write_str(out, region_id)
    out.write(_U32.pack(len(cell.partial_areas)))
    for area in cell.partial_areas:
        _write_str(out, area.region_id)
        _write_rings(out, area.outer)
        _write_rings(out, area.inner)


def write_raster(raster: Raster, out: BinaryIO) -> None:
    """Write *raster* to a binary stream."""
    out.write(_U32.pack(raster.width))
    out.write(_U32.pack(raster.height))
    out.write(_U32.pack(len(raster.region_areas)))
    for region_id, area in raster.region_areas.items():
        _write_str(out, region_id)
        out.write(_F64.pack(area))
    for cell in raster.cells:
        _write_cell(out, cell)


def save_raster(raster: Raster, path: Union[str, pathlib.Path]) -> pathlib.Path:
    """Write *raster* to *path*, creating parent directories."""
    path = pathlib.Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'wb') as f:
        write_raster(raster, f)
    size_mb = path.stat().st_size / 1024 / 1024
    logger.info(f"Wrote raster to {path} ({size_mb:.1f} MB)")
    return path


# ── Reading ─────────────────────────────────────────────────────────────

def _read(inp: BinaryIO, fmt: struct.Struct) -> tuple:
    data = inp.read(fmt.size)
    if len(data) != fmt.size:
        raise EOFError("Unexpected end of raster data")
    return fmt.unpack(data)


def _read_str(inp: BinaryIO) -> str:
    (length,) = _read(inp, _U16)
    data = inp.read(length)
    if len(data) != length:
        raise EOFError("Unexpected end of raster data")
    return data.decode('utf-8')


def _read_rings(inp: BinaryIO) -> list:
    (count,) = _read(inp, _U32)
    rings = []
    for _ in range(count):
        (points,) = _read(inp, _U32)
        rings.append([_read(inp, _POINT) for _ in range(points)])
    return rings


def _read_cell(inp: BinaryIO) -> CellResult:
    (count,) = _read(inp, _U32)
    containing = [_read_str(inp) for _ in range(count)]
    (count,) = _read(inp, _U32)
    partial = []
    for _ in range(count):
        region_id = _read_str(inp)
        outer = _read_rings(inp)
        inner = _read_rings(inp)
        partial.append(RegionArea(region_id, outer, inner))
    return CellResult(containing, partial)


def read_raster(inp: BinaryIO) -> Raster:
    """Read a raster written by ``write_raster``."""
    width, height = _read(inp, _U32)[0], _read(inp, _U32)[0]
    (count,) = _read(inp, _U32)
    areas = {}
    for _ in range(count):
        region_id = _read_str(inp)
        areas[region_id] = _read(inp, _F64)[0]
    cells = [_read_cell(inp) for _ in range(width * height)]
    return Raster(width, height, cells, areas)


def load_raster(path: Union[str, pathlib.Path]) -> Raster:
    with open(path, 'rb') as f:
        return read_raster(f)
