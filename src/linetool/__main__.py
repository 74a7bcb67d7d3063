"""CLI entry point: ``python -m linetool --mode straight --start 0,0 --end 100,0``"""

from __future__ import annotations

import argparse
import csv
import logging
import os
import sys
from pathlib import Path

from .config.defaults import DEFAULT_SPACING, build_default_footprint_library
from .core.footprint import ObjectFootprint, footprint_from_mesh, footprints_overlap
from .core.geometry import FlatTerrain, vec3
from .core.path import modes
from .core.path.base import ControlRole, LineMode, PathState
from .core.spacing import RotationMode, SpacingMode, SpacingPolicy

_MODES = {
    "straight": LineMode.STRAIGHT,
    "curve": LineMode.SIMPLE_CURVE,
    "circle": LineMode.CIRCLE,
}


def _point(text: str):
    """Parse "x,z" or "x,y,z"."""
    try:
        return vec3(float(v) for v in text.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid point {text!r}: {exc}") from None


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="linetool",
        description="Place objects along straight lines, curves and circles.",
    )
    p.add_argument("--gui", action="store_true",
                   help="Launch the desktop GUI (default when no --mode given)")
    p.add_argument("--mode", choices=sorted(_MODES), default=None,
                   help="Path shape to compute headlessly")

    # Control points
    p.add_argument("--start", type=_point, help="Start point (straight/curve)")
    p.add_argument("--elbow", type=_point, help="Elbow point (curve)")
    p.add_argument("--end", type=_point, help="End point (straight/curve)")
    p.add_argument("--center", type=_point, help="Centre point (circle)")
    p.add_argument("--radius-point", type=_point,
                   help="Point on the circle (sets radius and start angle)")

    # Spacing
    p.add_argument("--spacing", type=float, default=DEFAULT_SPACING,
                   help=f"Manual spacing (default: {DEFAULT_SPACING:g})")
    p.add_argument("--spacing-mode", choices=[m.value for m in SpacingMode],
                   default=SpacingMode.MANUAL.value,
                   help="Spacing policy (default: manual)")
    p.add_argument("--random-spacing", type=float, default=0.0,
                   help="Along-path jitter amplitude (default: 0)")
    p.add_argument("--random-offset", type=float, default=0.0,
                   help="Lateral jitter amplitude (default: 0)")

    # Rotation
    p.add_argument("--rotation", type=float, default=0.0,
                   help="Rotation in degrees (default: 0)")
    p.add_argument("--rotation-mode", choices=[m.value for m in RotationMode],
                   default=RotationMode.RELATIVE.value,
                   help="How --rotation is applied (default: relative)")

    # Object
    obj = p.add_mutually_exclusive_group()
    obj.add_argument("--footprint", default=None,
                     help="Built-in footprint name (e.g. 'Wooden Fence')")
    obj.add_argument("--mesh", type=Path, default=None,
                     help="Mesh file to measure the footprint from")

    # Terrain / output
    p.add_argument("--ground", type=float, default=0.0,
                   help="Flat terrain height (default: 0)")
    p.add_argument("--csv", type=Path, default=None,
                   help="Write points to a CSV file instead of stdout")

    return p


def _resolve_footprint(args) -> ObjectFootprint:
    if args.mesh is not None:
        return footprint_from_mesh(args.mesh)
    if args.footprint is not None:
        fp = build_default_footprint_library().get(args.footprint)
        if fp is None:
            raise ValueError(f"unknown footprint {args.footprint!r}")
        return fp
    return ObjectFootprint(name="(none)")


def _build_path(args) -> tuple[PathState, object]:
    """Fill a PathState from the control-point arguments.

    Returns the state with every pre-terminal role set, plus the terminal
    position.
    """
    kind = _MODES[args.mode]
    state = PathState(kind=kind)
    given = {
        ControlRole.START: args.start,
        ControlRole.ELBOW: args.elbow,
        ControlRole.END: args.end,
        ControlRole.CENTER: args.center,
        ControlRole.RADIUS: args.radius_point,
    }
    for role in state.roles:
        if given[role] is None and role is not ControlRole.ELBOW:
            flag = "--radius-point" if role is ControlRole.RADIUS else "--" + role.value
            raise ValueError(f"{args.mode} mode requires {flag}")
    for role in state.roles[:-1]:
        if given[role] is not None:
            state.points[role] = given[role]
    return state, given[state.terminal_role]


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = _build_parser().parse_args(argv)

    # Launch GUI when --gui flag is set or no path mode given
    if args.gui or args.mode is None:
        from .app import launch_gui
        return launch_gui()

    try:
        footprint = _resolve_footprint(args)
        policy = SpacingPolicy(
            spacing=args.spacing,
            mode=SpacingMode(args.spacing_mode),
            random_spacing=args.random_spacing,
            random_offset=args.random_offset,
            rotation=args.rotation,
            rotation_mode=RotationMode(args.rotation_mode),
            footprint=footprint,
        )
        state, terminal = _build_path(args)
    except (ValueError, FileNotFoundError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    result = modes.calculate_points(state, terminal, policy, FlatTerrain(args.ground))

    if args.csv is not None:
        with open(args.csv, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(["x", "y", "z", "rotation"])
            for pt in result.points:
                writer.writerow([f"{v:.4f}" for v in (*pt.as_tuple(), pt.rotation)])
        print(f"Wrote {len(result.points)} points to {args.csv}")
    else:
        for pt in result.points:
            x, y, z = pt.as_tuple()
            print(f"{x:.4f} {y:.4f} {z:.4f} {pt.rotation:.2f}")

    print(f"{len(result.points)} x {footprint.name}, "
          f"length {result.length:.2f}, spacing {result.spacing:.2f}",
          file=sys.stderr)
    if state.kind is LineMode.CIRCLE and result.points:
        print(f"  angle step {result.angle_step:.2f} deg", file=sys.stderr)
    if footprint.length > 0 and footprints_overlap(footprint, result.points):
        print("  Warning: placed footprints overlap", file=sys.stderr)

    return 0


if __name__ == "__main__":
    sys.exit(main())
