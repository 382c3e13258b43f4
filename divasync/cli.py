"""Command that builds the JSON tables of today's capture session."""

from __future__ import annotations

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path

from .dataset import DatasetBuilder
from .sensordata import (
    write_cam_data,
    write_can_data,
    write_gps_data,
    write_imu_data,
    write_lidar_data,
)
from .tokens import date_stamp

DEFAULT_BASE = Path.home() / "DIVA2" / "diva2-server" / "DIVA2_DATA"
SENSOR_SLOTS = 5
DEFAULT_CAR_ID = 0


def session_directory(base: str | os.PathLike, now: datetime | None = None) -> Path:
    """Directory of the first session captured on the given day."""
    return Path(base) / f"{date_stamp(now)}_0"


def run(directory: str | os.PathLike) -> DatasetBuilder:
    """Build and write every JSON table of the session in ``directory``."""
    builder = DatasetBuilder(directory)
    builder.write_sensors(SENSOR_SLOTS)
    builder.write_log(DEFAULT_CAR_ID)
    builder.write_frames()
    builder.write_scenes()
    write_lidar_data(builder)
    write_cam_data(builder)
    write_gps_data(builder)
    write_imu_data(builder)
    write_can_data(builder)
    return builder


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="divasync",
        description="Align sensor recordings and write the session's JSON tables.",
    )
    parser.add_argument(
        "base",
        nargs="?",
        default=str(DEFAULT_BASE),
        help="directory holding the dated session directories",
    )
    parser.add_argument(
        "--session",
        help="session directory to process instead of today's",
    )
    args = parser.parse_args(argv)

    directory = Path(args.session) if args.session else session_directory(args.base)
    (directory / "JSON").mkdir(parents=True, exist_ok=True)
    try:
        run(directory)
    except (OSError, ValueError, IndexError, RuntimeError) as exc:
        print(f"divasync: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())