"""Locating and reading the per-sensor recording files of a capture session."""

from __future__ import annotations

import os
from enum import IntEnum
from pathlib import Path

VEHICLE_TAG = "i30"


class Sensor(IntEnum):
    """The sensors recorded in a session, in their canonical order."""

    GPS = 1
    CAM = 2
    LIDAR = 3
    IMU = 4
    CAN = 5

    @property
    def directory_name(self) -> str:
        """Name of the session sub-directory holding this sensor's files."""
        return _DIRECTORY_NAMES[self]


_DIRECTORY_NAMES = {
    Sensor.GPS: "GPS",
    Sensor.CAM: "CAM",
    Sensor.LIDAR: "LiDAR",
    Sensor.IMU: "IMU",
    Sensor.CAN: "CAN",
}


def latest_sensor_file(directory: str | os.PathLike, sensor: Sensor) -> Path:
    """Return the most recently modified vehicle file in a sensor's directory.

    Among entries whose name contains the vehicle tag, the newest by
    modification time wins; ties go to the alphabetically first name.
    Hidden entries are ignored.
    """
    sensor_dir = Path(directory) / Sensor(sensor).directory_name
    try:
        candidates = sorted(
            (
                entry
                for entry in sensor_dir.iterdir()
                if VEHICLE_TAG in entry.name and not entry.name.startswith(".")
            ),
            key=lambda entry: entry.name,
        )
    except OSError as exc:
        raise FileNotFoundError(f"cannot list sensor directory {sensor_dir}") from exc
    if not candidates:
        raise FileNotFoundError(
            f"no file tagged {VEHICLE_TAG!r} in sensor directory {sensor_dir}"
        )
    return max(candidates, key=lambda entry: entry.stat().st_mtime_ns)


def _split_records(text: str, separator: str) -> list[str]:
    """Split like repeated getline: a trailing empty piece is not a record."""
    parts = text.split(separator)
    if parts[-1] == "":
        parts.pop()
    return parts


def _read_text(path: str | os.PathLike) -> str:
    with open(path, encoding="utf-8", errors="surrogateescape", newline="") as handle:
        return handle.read()


def read_csv(path: str | os.PathLike) -> list[list[str]]:
    """Read a comma-separated file into a list of rows of string fields."""
    return [_split_records(line, ",") for line in _split_records(_read_text(path), "\n")]


def read_txt(path: str | os.PathLike) -> list[str]:
    """Read a text file into a list of its lines."""
    return _split_records(_read_text(path), "\n")