#!/usr/bin/env python3
"""
Command-Line Interface

Generates blades, single turbines, or complete wind farms and writes the
resulting meshes to disk.

Examples:
  # Built-in blade lofted to a 63 m tip radius
  turbinegen blade out/ --rtip 63

  # Blade from tabulated data
  turbinegen blade out/ --data-path data/ --blade-name NREL5MW --rtip 63 --rhub 1.5

  # Single 3-bladed turbine, 126 m rotor on a 90 m tower
  turbinegen turbine out/ --diameter 126 --height 90

  # Farm from a layout CSV (D,H,N,x,y,z,yaw) and a perimeter CSV (x,y)
  turbinegen farm layout.csv perimeter.csv out/ --ndivs-z 20

  # Farm whose layout CSV has a 'blade' column naming each turbine's blade data
  turbinegen farm layout.csv perimeter.csv out/ --data-path data/
"""
import argparse
import logging
import os
import sys

from turbinegen import io
from turbinegen.config import HUB_RADIUS, FluidDomainOptions
from turbinegen.farm import generate_windfarm
from turbinegen.logging_config import setup_logging
from turbinegen.loft import generate_blade
from turbinegen.multipart import MultiPartMesh
from turbinegen.turbine import (BLADE_NDIVS, DEFAULT_BLADE_SPLINE, TurbineParts,
                                default_blade_tables, generate_windturbine)

logger = logging.getLogger(__name__)


def _load_parts(args, blade_name):
    """Turbine parts with a blade from the data directory, or the built-in parts."""
    if not args.data_path:
        return TurbineParts.default(blade_ndivs=args.r_ndivs)
    tables = io.load_blade_tables(blade_name, args.data_path)
    return TurbineParts.from_tables(tables, blade_ndivs=args.r_ndivs)


def _run_blade(args):
    if args.data_path:
        tables = io.load_blade_tables(args.blade_name, args.data_path)
        spline = None
    else:
        tables = default_blade_tables()
        spline = DEFAULT_BLADE_SPLINE
    rhub = HUB_RADIUS * args.rtip if args.rhub is None else args.rhub
    blade = generate_blade(args.rtip, rhub, args.r_ndivs, tables, spline=spline)

    mesh = MultiPartMesh()
    mesh.add_part("blade", blade)
    return io.save_multipart(mesh, args.file_name, args.output, args.format)


def _run_turbine(args):
    turbine = generate_windturbine(args.diameter / 2, args.height, args.nblades,
                                   parts=_load_parts(args, args.blade_name))
    return io.save_multipart(turbine, args.file_name, args.output, args.format)


def _run_farm(args):
    layout = io.load_layout(args.layout)
    perimeter = io.load_contour(args.perimeter)
    options = FluidDomainOptions(ndivs_x=args.ndivs_x, ndivs_y=args.ndivs_y,
                                 ndivs_z=args.ndivs_z, z_min=args.z_min, z_max=args.z_max)

    # A 'blade' layout column picks the blade of every turbine
    blade_names = layout.get('blade') if args.data_path else None
    if blade_names:
        loaded = {}
        for name in blade_names:
            if name not in loaded:
                loaded[name] = _load_parts(args, name)
        parts = [loaded[name] for name in blade_names]
    else:
        parts = _load_parts(args, args.blade_name)

    windfarm, perimeter_grid, fluid_domain = generate_windfarm(
        layout['D'], layout['H'], layout['N'], layout['x'], layout['y'], layout['z'],
        layout['yaw'], perimeter, options=options, parts=parts
    )

    written = io.save_multipart(windfarm, args.file_name, args.output, args.format)
    written.append(io.save_mesh(perimeter_grid, os.path.join(args.output, f"{args.file_name}_perimeter")))
    written.append(io.save_mesh(fluid_domain, os.path.join(args.output, f"{args.file_name}_fdom")))
    return written


def _add_blade_source(parser):
    parser.add_argument('--data-path', default=None,
                        help='Directory with tabulated blade data (default: built-in blade)')
    parser.add_argument('--blade-name', default='NREL5MW', help='Blade file prefix (default: NREL5MW)')
    parser.add_argument('--r-ndivs', type=int, default=BLADE_NDIVS,
                        help=f'Divisions along the blade (default: {BLADE_NDIVS})')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='turbinegen',
        description='Generate wind turbine and wind farm meshes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='Examples:' + __doc__.split('Examples:')[1]
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    parser.add_argument('--log-file', default=None, help='Also write logs to this file')
    parser.add_argument('--format', default='stl', help='Triangle mesh file format (default: stl)')

    sub = parser.add_subparsers(dest='command', required=True)

    blade = sub.add_parser('blade', help='Loft a single blade')
    blade.add_argument('output', help='Output directory')
    _add_blade_source(blade)
    blade.add_argument('--rtip', type=float, default=1.0, help='Tip radius (default: 1.0)')
    blade.add_argument('--rhub', type=float, default=None,
                       help='Hub radius (default: built-in hub ratio times rtip)')
    blade.add_argument('--file-name', default='blade', help='Output file prefix (default: blade)')
    blade.set_defaults(run=_run_blade)

    turbine = sub.add_parser('turbine', help='Assemble a single turbine')
    turbine.add_argument('output', help='Output directory')
    turbine.add_argument('--diameter', type=float, required=True, help='Rotor diameter')
    turbine.add_argument('--height', type=float, required=True, help='Tower height')
    turbine.add_argument('--nblades', type=int, default=3, help='Number of blades (default: 3)')
    _add_blade_source(turbine)
    turbine.add_argument('--file-name', default='windturbine',
                         help='Output file prefix (default: windturbine)')
    turbine.set_defaults(run=_run_turbine)

    farm = sub.add_parser('farm', help='Generate a wind farm and its fluid domain')
    farm.add_argument('layout', help='Layout CSV with columns D,H,N,x,y,z,yaw and an optional blade column')
    farm.add_argument('perimeter', help='Perimeter CSV with columns x,y')
    farm.add_argument('output', help='Output directory')
    _add_blade_source(farm)
    farm.add_argument('--ndivs-x', type=int, default=50, help='Divisions along the perimeter (default: 50)')
    farm.add_argument('--ndivs-y', type=int, default=50, help='Divisions across the perimeter (default: 50)')
    farm.add_argument('--ndivs-z', type=int, default=50, help='Fluid domain layers (default: 50)')
    farm.add_argument('--z-min', type=float, default=None, help='Fluid domain bottom (default: 0)')
    farm.add_argument('--z-max', type=float, default=None,
                      help='Fluid domain top (default: max(H) + 1.25 * max(D) / 2)')
    farm.add_argument('--file-name', default='windfarm', help='Output file prefix (default: windfarm)')
    farm.set_defaults(run=_run_farm)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO, args.log_file)

    try:
        written = args.run(args)
    except (ValueError, TypeError, OSError) as e:
        logger.error("%s", e)
        return 1

    for path in written:
        logger.info("Wrote %s", path)
    return 0


if __name__ == '__main__':
    sys.exit(main())
