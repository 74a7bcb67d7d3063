"""Default tuning constants and the built-in object footprint set.

Footprints are representative sizes (metres) for common props; users
should measure their own assets or load a mesh.
"""

from ..core.footprint import FootprintLibrary, ObjectFootprint

DEFAULT_SPACING = 20.0
MIN_SPACING = 0.1             # hard floor so offset walking always terminates

DRAG_PICK_RADIUS = 8.0        # control point hit-test radius (world units)

CURVE_RESOLUTION = 1000       # chords used to measure a curve's arc length
OVERLAY_CURVE_SEGMENTS = 32
OVERLAY_CIRCLE_SEGMENTS = 64


def build_default_footprint_library() -> FootprintLibrary:
    """Return an in-memory FootprintLibrary with a few starter objects."""
    lib = FootprintLibrary.__new__(FootprintLibrary)
    lib._path = None   # in-memory only
    lib._footprints = {}

    footprints = [
        ObjectFootprint(name="Oak Tree", length=6.0, width=6.0, is_tree=True),
        ObjectFootprint(name="Birch Tree", length=4.0, width=4.0, is_tree=True),
        ObjectFootprint(name="Street Lamp", length=0.6, width=0.6),
        ObjectFootprint(name="Bollard", length=0.3, width=0.3),
        ObjectFootprint(name="Wooden Fence", length=8.0, width=0.4),
        ObjectFootprint(name="Hedge Block", length=2.0, width=1.0),
        ObjectFootprint(name="Stone Wall", length=4.0, width=0.8),
    ]

    for fp in footprints:
        lib.add(fp)

    return lib
