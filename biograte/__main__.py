"""Entry point for ``python -m biograte``.

Loads the default YAML config, builds an empty simulation session, and
opens a Pygame window to paint biomes and watch succession unfold.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from biograte.simulation.config import SimulationConfig
from biograte.simulation.session import Session
from biograte.ui.pygame_client import PygameRenderer

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def main() -> None:
    """Parse CLI args, create session, launch renderer."""
    parser = argparse.ArgumentParser(
        prog="biograte",
        description="Biograte - biome succession simulator",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=10,
        help="Pixel size per grid cell (default: 10)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig.from_yaml(args.config)
    session = Session.from_config(config)

    renderer = PygameRenderer(
        session=session,
        ambient=config.ambient,
        cell_size=args.cell_size,
        ticks_per_second=config.ticks_per_second,
    )
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
