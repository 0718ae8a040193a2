"""
sandtable CLI.

Usage:
    python -m sandtable.cli render <input.thr> <output.png> [-W 300] [-H 300] [-b 5] [-d 2]
    python -m sandtable.cli spiral <output.png> [--steps 10000]

Options shared by both commands:
    --config settings.json   JSON object of SimulationSettings overrides
    --export-raw             also write <output>_heightfield.bin/.json
    --show                   open a matplotlib preview when done
"""

import argparse
import sys
import time

from sandtable.config import SettingsError, SimulationSettings, load_settings
from sandtable.log import get_logger
from sandtable.maps import TableScale
from sandtable.physics.sand_simulation import SandSimulation
from sandtable.physics.spiral import SPIRAL_DT, run_spiral
from sandtable.tools import paths
from sandtable.tools.export_heightfield import write_heightfield
from sandtable.tools.render import save_image, show_heightfield, supported_extension, to_grayscale
from sandtable.tools.thr import ThrFormatError, read_thr

logger = get_logger("sandtable.cli")


def settings_from_args(args, defaults: SimulationSettings | None = None) -> SimulationSettings:
    """Defaults, then the --config file, then command-line flags."""
    defaults = defaults or SimulationSettings()
    base = load_settings(args.config, defaults) if args.config else defaults
    return base.with_overrides(
        width=args.width,
        height=args.height,
        ball_radius=args.ball,
        initial_depth=args.depth,
        dt=args.dt,
        margin=args.margin,
    ).validate()


def make_simulation(settings: SimulationSettings) -> SandSimulation:
    return SandSimulation(
        settings.width,
        settings.height,
        settings.ball_radius,
        settings.initial_depth,
        max_sweeps=settings.max_sweeps,
    )


def percent_reporter(label: str, every_pct: float = 10.0):
    """Progress callback logging once per `every_pct` percent."""
    state = {"next": every_pct}

    def report(done: int, total: int, *_):
        pct = 100.0 * done / total if total else 100.0
        if pct >= state["next"]:
            logger.info("%s %.0f%% (%d/%d)", label, pct, done, total)
            while state["next"] <= pct:
                state["next"] += every_pct

    return report


def print_settings(settings: SimulationSettings) -> None:
    for key, value in settings.to_dict().items():
        print(f"  {key}={value}")


def finish(sim: SandSimulation, settings: SimulationSettings, args, started: float) -> None:
    """Render, save, optionally export and preview."""
    heights = sim.heights()
    out = save_image(args.output, to_grayscale(heights))
    print(f"  Wrote: {out}")

    if args.export_raw:
        bin_path = paths.heightfield_bin_path(args.output)
        meta_path = paths.heightfield_json_path(args.output)
        write_heightfield(heights, bin_path, meta_path, settings)
        print(f"  Wrote: {bin_path}")
        print(f"  Wrote: {meta_path}")

    print(f"Done! Time taken: {time.perf_counter() - started:.3f}s")

    if args.show:
        show_heightfield(heights, title=args.output)


def cmd_render(args):
    """Handle the 'render' subcommand."""
    try:
        settings = settings_from_args(args)
    except (SettingsError, OSError) as e:
        logger.error("Bad settings: %s", e)
        sys.exit(1)

    if not supported_extension(args.output):
        logger.error("Unsupported file format: %s", args.output, extra={"output": args.output})
        sys.exit(1)

    print(f"inputFilename={args.input}")
    print(f"outputFilename={args.output}")
    print_settings(settings)

    # Parse everything up front so a bad file never half-runs
    try:
        waypoints = read_thr(args.input)
    except (ThrFormatError, OSError) as e:
        logger.error("Error reading file %s: %s", args.input, e, extra={"input": args.input})
        sys.exit(1)

    started = time.perf_counter()

    scale = TableScale(settings.width, settings.height, settings.margin)
    sim = make_simulation(settings)
    try:
        steps = sim.run_waypoints(
            scale.to_grid_all(waypoints),
            dt=settings.dt,
            progress=percent_reporter("Waypoints"),
        )
    except RuntimeError as e:
        # RelaxationError or a target the ball never reached
        logger.error("Simulation failed: %s", e, extra={"sweeps": getattr(e, "sweeps", None)})
        sys.exit(1)

    logger.info("Simulated %d waypoints in %d steps", len(waypoints), steps)

    try:
        finish(sim, settings, args, started)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error saving file %s: %s", args.output, e, extra={"output": args.output})
        sys.exit(1)


def cmd_spiral(args):
    """Handle the 'spiral' subcommand."""
    try:
        settings = settings_from_args(args, SimulationSettings(dt=SPIRAL_DT))
    except (SettingsError, OSError) as e:
        logger.error("Bad settings: %s", e)
        sys.exit(1)

    if not supported_extension(args.output):
        logger.error("Unsupported file format: %s", args.output, extra={"output": args.output})
        sys.exit(1)

    print(f"outputFilename={args.output}")
    print_settings(settings)

    started = time.perf_counter()
    sim = make_simulation(settings)
    try:
        reached = run_spiral(sim, args.steps, margin=settings.margin, dt=settings.dt, progress=percent_reporter("Steps"))
    except RuntimeError as e:
        # RelaxationError or a target the ball never reached
        logger.error("Simulation failed: %s", e, extra={"sweeps": getattr(e, "sweeps", None)})
        sys.exit(1)

    logger.info("Spiral reached %d targets in %d steps", reached, args.steps)

    try:
        finish(sim, settings, args, started)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error saving file %s: %s", args.output, e, extra={"output": args.output})
        sys.exit(1)


# ---------------------------------------------------------------------------
# main
# ---------------------------------------------------------------------------

def _add_sim_options(p):
    p.add_argument("-W", "--width", type=int, default=None, help="Table width in cells (default 300)")
    p.add_argument("-H", "--height", type=int, default=None, help="Table height in cells (default 300)")
    p.add_argument("-b", "--ball", type=float, default=None, help="Ball radius in cells (default 5)")
    p.add_argument("-d", "--depth", type=float, default=None, help="Initial sand depth (default 2)")
    p.add_argument("-m", "--margin", type=int, default=None,
                   help="Cells kept clear between rho=1 and the table edge (default 20)")
    p.add_argument("--dt", type=float, default=None,
                   help="Time step per update (default 0.2 for render, 0.5 for spiral)")
    p.add_argument("--config", default=None, help="JSON file of simulation settings")
    p.add_argument("--export-raw", action="store_true",
                   help="Also write the raw float32 heightfield and its JSON metadata")
    p.add_argument("--show", action="store_true", help="Preview the result with matplotlib")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sandtable.cli",
        description="Simulate a ball rolling through sand and render the table",
    )
    sub = parser.add_subparsers(dest="command")

    # render subcommand
    render_p = sub.add_parser("render", help="Render a THR file")
    render_p.add_argument("input", help="THR file (theta rho per line)")
    render_p.add_argument("output", help="Image file; format from extension (e.g. out.png)")
    _add_sim_options(render_p)
    render_p.set_defaults(func=cmd_render)

    # spiral subcommand
    spiral_p = sub.add_parser("spiral", help="Render the inward spiral demo")
    spiral_p.add_argument("output", help="Image file; format from extension (e.g. out.png)")
    spiral_p.add_argument("--steps", type=int, default=10000, help="Number of updates (default 10000)")
    _add_sim_options(spiral_p)
    spiral_p.set_defaults(func=cmd_spiral)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
