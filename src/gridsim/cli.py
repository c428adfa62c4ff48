"""
GridSim command-line interface.

Runs a race either in batch mode (as fast as possible, tables printed to
the console) or in GUI mode (paced to the wall clock and drawn live).

Usage:
    gridsim                          # Built-in two-vehicle race, batch mode
    gridsim -t 0.01                  # Smaller step size
    gridsim -p race.json -o out.txt  # Scenario from a parameter file
    gridsim --plot-file laps.png     # Lap time chart of the result
    gridsim -g -r 10 --track-file track.csv
"""

from pathlib import Path
from typing import List, Optional
import argparse
import logging
import sys
import time

from gridsim import __version__
from gridsim.errors import GridSimError
from gridsim.scoring.results import RaceResult
from gridsim.simulation.config import (
    RaceConfig,
    SimOptions,
    default_race_config,
    load_race_config,
)
from gridsim.simulation.pacing import iter_realtime
from gridsim.simulation.race import RaceController
from gridsim.telemetry.exporter import ExporterConfig, RaceExporter
from gridsim.track.generator import generate_closed_loop
from gridsim.track.geometry import load_track_csv
from gridsim.track.track import Track

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="gridsim",
        description="Time-discrete race simulator with tire degradation and pit stops",
    )
    parser.add_argument(
        "-g", "--gui",
        action="store_true",
        help="Show the race live; it runs in real time scaled by --realtime-factor",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (lap completions, pit stops, progress)",
    )
    parser.add_argument(
        "-t", "--timestep-size",
        type=float,
        default=0.1,
        help="Simulation step size in seconds (default: 0.1)",
    )
    parser.add_argument(
        "-r", "--realtime-factor",
        type=float,
        default=1.0,
        help="Simulated seconds per wall-clock second, GUI mode only (default: 1.0)",
    )
    parser.add_argument(
        "-p", "--parfile-path",
        type=Path,
        dest="parfile",
        help="JSON parameter file (default: built-in two-vehicle race)",
    )
    parser.add_argument(
        "--track-file",
        type=Path,
        help="Track centerline CSV (distance,x,y), used in GUI mode",
    )
    parser.add_argument(
        "-o", "--results-file",
        type=Path,
        help="Write the result tables to this file",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        help="Export per-tick CSV, result JSON and lap summary into this directory",
    )
    parser.add_argument(
        "--plot-file",
        type=Path,
        help="Save a lap time chart of the result to this PNG file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def options_from_args(args: argparse.Namespace) -> SimOptions:
    """Build validated run options from parsed arguments."""
    options = SimOptions(
        gui=args.gui,
        debug=args.debug,
        timestep_size=args.timestep_size,
        realtime_factor=args.realtime_factor,
        track_file=args.track_file,
        parfile=args.parfile,
        results_file=args.results_file,
        export_dir=args.export_dir,
        plot_file=args.plot_file,
    )
    options.validate()
    return options


def setup_logging(debug: bool) -> None:
    """Configure console logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("gridsim").setLevel(level)


def load_scenario(options: SimOptions) -> RaceConfig:
    """Read the race scenario from the parameter file or use the built-in one."""
    if options.parfile is None:
        logger.info("Using the built-in race scenario")
        return default_race_config()
    logger.info(f"Reading simulation parameters from {options.parfile}")
    return load_race_config(options.parfile)


def attach_geometry(track: Track, track_file: Optional[Path]) -> Track:
    """Return the track with centerline geometry for rendering.

    Raises:
        TrackLoadError: If the given track file is missing or malformed
    """
    if track_file is None:
        logger.info("No track file given, drawing a generated closed loop")
        geometry = generate_closed_loop(track.length_m)
    else:
        logger.info(f"Loading track from {track_file}")
        geometry = load_track_csv(track_file, track.length_m)
    return Track(
        length_m=track.length_m,
        lap_count=track.lap_count,
        name=track.name,
        geometry=geometry,
    )


def run_batch(race_config: RaceConfig, options: SimOptions) -> RaceResult:
    """Run the race back to back and print the result tables."""
    logger.info("Running simulation without GUI")
    controller = RaceController(race_config)

    started = time.perf_counter()
    snapshots = controller.run(options.timestep_size)
    elapsed_ms = (time.perf_counter() - started) * 1000.0

    final = snapshots[-1] if snapshots else controller.snapshot()
    result = RaceResult.from_snapshot(final, race_config.track.lap_count)
    print(result.format_tables())
    print(f"Execution time: {elapsed_ms:.0f}ms ({controller.tick_count} ticks)")

    if options.export_dir is not None:
        exporter = RaceExporter(ExporterConfig(output_dir=str(options.export_dir)))
        csv_path = exporter.export_csv(snapshots)
        json_path = exporter.export_json(result, race_config)
        summary_path = exporter.export_lap_summary(result)
        logger.info(f"Exported telemetry to {csv_path}, {json_path} and {summary_path}")

    return result


def run_gui(race_config: RaceConfig, options: SimOptions) -> RaceResult:
    """Run the race in real time with the live viewer."""
    from gridsim.viewer.renderer import RaceViewer

    track = attach_geometry(race_config.track, options.track_file)
    logger.info(f"Starting GUI simulation (realtime factor {options.realtime_factor:g})")

    controller = RaceController(race_config)
    viewer = RaceViewer(track, [v.vehicle_id for v in race_config.vehicles])
    viewer.show()

    last = controller.snapshot()
    for last in iter_realtime(
        controller,
        options.timestep_size,
        options.realtime_factor,
        should_stop=lambda: viewer.is_closed,
    ):
        viewer.update(last)

    result = RaceResult.from_snapshot(last, race_config.track.lap_count)
    if result.is_complete:
        print(result.format_tables())
    else:
        logger.info(f"Race stopped at t={last.elapsed_s:.1f}s before the finish")

    viewer.wait_until_closed()
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Command line entry point.

    Returns:
        Process exit status
    """
    args = parse_args(argv)
    setup_logging(args.debug)

    try:
        options = options_from_args(args)
        race_config = load_scenario(options)
        race_config.validate()

        track = race_config.track
        logger.info(
            f"Race: {track.name}, {track.length_m:.0f}m x {track.lap_count} laps, "
            f"{len(race_config.vehicles)} vehicles, dt={options.timestep_size}s"
        )
        if options.timestep_size > 1.0:
            logger.warning(
                "Step sizes above 1s defer lap completions to later ticks on short tracks"
            )

        if options.gui:
            result = run_gui(race_config, options)
        else:
            if options.track_file is not None:
                logger.debug("Track file is only used in GUI mode, ignoring it")
            result = run_batch(race_config, options)

        if options.results_file is not None:
            path = result.write(options.results_file)
            logger.info(f"Results written to {path}")
        if options.plot_file is not None:
            from gridsim.scoring.plot import plot_lap_times

            path = plot_lap_times(result, options.plot_file)
            logger.info(f"Lap time chart saved to {path}")
    except GridSimError as e:
        logger.error(str(e))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
