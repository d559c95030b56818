"""Merge touching rings into OGC Simple-Feature compliant polygons.

Boundary data often describes one area as several rings that share edges,
e.g. a lake split into two triangular holes along a diagonal, or a country
made of adjacent pieces.  Such input is not Simple-Feature valid.  The
functions here splice rings together wherever they share boundary segments:

1. Every ring is oriented so the polygon interior lies to its left (shells
   counter-clockwise, holes clockwise) and cut into directed edges.
   Vertices are keyed by their fixed-point encoding, never by float
   equality.
2. A segment shared by two rings shows up as two opposite directed edges.
   Both are dropped, which joins the remaining parts of the two rings at
   the shared vertices.
3. The surviving edges are traced back into rings, starting from the first
   unused edge in input order.  Where several rings meet in one vertex the
   outgoing edge with the tightest clockwise turn is followed.  A traced
   ring that passes the same vertex twice is cut there, so rings that only
   touch in a point come out as separate rings.
4. Counter-clockwise rings become shells, clockwise rings holes of the
   smallest shell containing them.

Rings that share nothing pass through unchanged.
"""

import logging
import math
from collections import defaultdict
from typing import Iterable, Sequence, Union

from shapely.geometry import LinearRing, MultiPolygon, Polygon
from shapely.validation import explain_validity

from .exceptions import InvalidGeometryError
from .fixed_point import encode_point

logger = logging.getLogger(__name__)

Coords = Sequence[Sequence[float]]


# ── Ring preparation ────────────────────────────────────────────────────

def _is_ccw(points) -> bool:
    """Orientation of an open ring; raises on rings that enclose no area."""
    if Polygon(points).area == 0.0:
        raise InvalidGeometryError(f"Ring has zero area: {points[:4]}")
    return LinearRing(points).is_ccw


def _open_ring(coords: Coords, coord_of: dict) -> list:
    """Return the ring's vertex keys, open and without repeated vertices.

    Records the first float coordinate seen for every key in *coord_of*.
    """
    keys = []
    for c in coords:
        x, y = float(c[0]), float(c[1])
        key = encode_point(x, y)
        coord_of.setdefault(key, (x, y))
        if not keys or keys[-1] != key:
            keys.append(key)
    while len(keys) > 1 and keys[0] == keys[-1]:
        keys.pop()
    if len(keys) < 3:
        raise InvalidGeometryError(
            f"Ring has fewer than 3 distinct vertices: {list(coords)[:4]}")
    return keys


def _oriented(keys: list, coord_of: dict, ccw: bool) -> list:
    if _is_ccw([coord_of[k] for k in keys]) != ccw:
        # reverse but keep the first vertex in front
        keys = [keys[0]] + keys[:0:-1]
    return keys


# ── Edge cancellation and tracing ───────────────────────────────────────

def _cancel_shared_edges(rings: list) -> list:
    """Directed edges of all *rings* minus every pair of opposite edges."""
    edges = []
    position = {}
    for keys in rings:
        n = len(keys)
        for i in range(n):
            edge = (keys[i], keys[(i + 1) % n])
            if edge in position:
                raise InvalidGeometryError(
                    f"Overlapping rings: edge {edge} occurs twice "
                    f"in the same direction")
            position[edge] = len(edges)
            edges.append(edge)

    alive = [True] * len(edges)
    cancelled = 0
    for i, (a, b) in enumerate(edges):
        if not alive[i]:
            continue
        j = position.get((b, a))
        if j is not None and alive[j]:
            alive[i] = alive[j] = False
            cancelled += 1
    if cancelled:
        logger.debug(f"Cancelled {cancelled} shared edge pairs")
    return [e for e, keep in zip(edges, alive) if keep]


def _clockwise_turn(coord_of: dict, a, b, c) -> float:
    """Clockwise angle from direction b->a to direction b->c, in (0, 2pi]."""
    bx, by = coord_of[b]
    ax, ay = coord_of[a]
    cx, cy = coord_of[c]
    angle = (math.atan2(ay - by, ax - bx) - math.atan2(cy - by, cx - bx)) % (2 * math.pi)
    return angle if angle > 0 else 2 * math.pi


def _trace_rings(edges: list, coord_of: dict) -> list:
    outgoing = defaultdict(list)
    for i, (a, _) in enumerate(edges):
        outgoing[a].append(i)

    used = [False] * len(edges)
    rings = []
    for start in range(len(edges)):
        if used[start]:
            continue
        ring = []
        current = start
        while True:
            used[current] = True
            a, b = edges[current]
            ring.append(a)
            candidates = outgoing[b]
            if len(candidates) == 1:
                nxt = candidates[0]
            else:
                nxt = min(candidates,
                          key=lambda e: _clockwise_turn(coord_of, a, b, edges[e][1]))
            if nxt == start:
                break
            if used[nxt]:
                raise InvalidGeometryError(
                    f"Cannot resolve ring touching at {coord_of[b]}")
            current = nxt
        rings.extend(_split_at_repeats(ring))
    return rings


def _split_at_repeats(ring: list) -> list:
    """Cut a ring that passes a vertex more than once into simple rings."""
    loops = []
    stack = []
    position = {}
    for key in ring:
        i = position.get(key)
        if i is None:
            position[key] = len(stack)
            stack.append(key)
            continue
        loops.append(stack[i:])
        for k in stack[i + 1:]:
            del position[k]
        del stack[i + 1:]
    loops.append(stack)
    return loops


# ── Assembly ────────────────────────────────────────────────────────────

def _assemble(rings: list, coord_of: dict) -> list[Polygon]:
    shells, holes = [], []
    for keys in rings:
        points = [coord_of[k] for k in keys]
        if len(points) < 3:
            raise InvalidGeometryError(f"Degenerate ring after merge: {points}")
        if _is_ccw(points):
            shells.append(points)
        else:
            holes.append(points)

    shell_polys = [Polygon(s) for s in shells]
    shell_holes = [[] for _ in shells]
    for hole in holes:
        hole_poly = Polygon(hole)
        containing = [i for i, sp in enumerate(shell_polys) if sp.contains(hole_poly)]
        if not containing:
            raise InvalidGeometryError(
                f"Hole starting at {hole[0]} lies outside every shell")
        best = min(containing, key=lambda i: shell_polys[i].area)
        shell_holes[best].append(hole)

    return [Polygon(s, h) for s, h in zip(shells, shell_holes)]


def _validated(geom):
    if not geom.is_valid:
        raise InvalidGeometryError(f"Merged geometry is invalid: {explain_validity(geom)}")
    return geom


def _merge_rings(shells: Iterable[Coords], holes: Iterable[Coords]) -> list[Polygon]:
    coord_of = {}
    rings = [_oriented(_open_ring(r, coord_of), coord_of, ccw=True) for r in shells]
    rings += [_oriented(_open_ring(r, coord_of), coord_of, ccw=False) for r in holes]
    edges = _cancel_shared_edges(rings)
    if not edges:
        raise InvalidGeometryError("All edges cancelled out; rings are identical")
    return _assemble(_trace_rings(edges, coord_of), coord_of)


# ── Public API ──────────────────────────────────────────────────────────

def merge_polygon(shell: Coords, holes: Iterable[Coords] = ()) -> Union[Polygon, MultiPolygon]:
    """Create a valid polygon from a shell and holes that may touch.

    Holes sharing edges with each other are merged into a single hole; a hole
    sharing an edge with the shell becomes a notch in the shell.  If the
    holes cut the shell into pieces the result is a MultiPolygon.
    """
    parts = _merge_rings([shell], holes)
    if len(parts) == 1:
        return _validated(parts[0])
    return _validated(MultiPolygon(parts))


def merge_polygons(polygons: Iterable[Union[Polygon, MultiPolygon]]) -> MultiPolygon:
    """Create a valid multipolygon from polygons that may share edges.

    Shells of adjacent polygons are spliced into one shell; their hole lists
    are concatenated.
    """
    shells, holes = [], []
    for poly in polygons:
        for part in getattr(poly, "geoms", [poly]):
            if part.is_empty:
                continue
            shells.append(part.exterior.coords)
            holes.extend(interior.coords for interior in part.interiors)
    if not shells:
        raise InvalidGeometryError("No polygons to merge")
    return _validated(MultiPolygon(_merge_rings(shells, holes)))


def make_valid_region(geometry) -> Union[Polygon, MultiPolygon]:
    """Merge the rings of a region's Polygon or MultiPolygon geometry."""
    if isinstance(geometry, Polygon):
        return merge_polygon(geometry.exterior.coords,
                             [interior.coords for interior in geometry.interiors])
    if isinstance(geometry, MultiPolygon):
        return merge_polygons(geometry.geoms)
    raise InvalidGeometryError(f"Expected polygonal geometry, got {geometry.geom_type}")
