"""Aligning the recordings of several sensors on a common time axis."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path

from .readfiles import Sensor, latest_sensor_file, read_csv

_LEADING_INT = re.compile(r"\s*[+-]?\d+")

# Largest clock difference accepted when matching a row to a timestamp.
_MATCH_TOLERANCE = {
    Sensor.GPS: 110,
    Sensor.CAM: 60,
    Sensor.LIDAR: 110,
    Sensor.IMU: 110,
    Sensor.CAN: 260,
}

# Largest distance past the common start accepted for a sensor's first row.
_START_TOLERANCE = {
    Sensor.GPS: 110,
    Sensor.CAM: 60,
    Sensor.LIDAR: 110,
    Sensor.IMU: 45,
    Sensor.CAN: 60,
}


def clock_value(timestamp: str) -> int:
    """Return the HHMMSSmmm part of a YYYYMMDDHHMMSSmmm timestamp as an integer.

    Like a leading-integer parse, trailing non-digit characters are ignored.
    """
    if len(timestamp) < 8:
        raise ValueError(f"timestamp too short: {timestamp!r}")
    match = _LEADING_INT.match(timestamp[8:17])
    if match is None:
        raise ValueError(f"timestamp has no clock part: {timestamp!r}")
    return int(match.group())


@dataclass
class SensorIndex:
    """The rows of each sensor's recording and the indexes that align them."""

    tables: dict[Sensor, list[list[str]]]
    directory: Path | None = None
    start_clock: int = 0
    latest_sensor: Sensor | None = field(default=None, init=False)
    earliest_sensor: Sensor | None = field(default=None, init=False)
    gps_last: int | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        tables = {Sensor(key): list(rows) for key, rows in self.tables.items()}
        self.tables = {sensor: tables.get(sensor, []) for sensor in Sensor}

    @classmethod
    def from_directory(cls, directory: str | os.PathLike) -> SensorIndex:
        """Load the newest recording of every sensor in a session directory."""
        directory = Path(directory)
        tables = {
            sensor: read_csv(latest_sensor_file(directory, sensor)) for sensor in Sensor
        }
        return cls(tables=tables, directory=directory)

    def rows(self, sensor: Sensor) -> list[list[str]]:
        """All rows recorded for a sensor."""
        return self.tables[Sensor(sensor)]

    def timestamp(self, sensor: Sensor, index: int) -> str:
        """The timestamp field of one row of a sensor."""
        if index < 0:
            raise IndexError(f"negative row index {index}")
        return self.rows(sensor)[index][0]

    def _first_timestamp(self, sensor: Sensor) -> str:
        rows = self.rows(sensor)
        if not rows:
            raise ValueError(f"no rows recorded for {sensor.name}")
        return rows[0][0]

    def _last_timestamp(self, sensor: Sensor) -> str:
        rows = self.rows(sensor)
        if not rows:
            raise ValueError(f"no rows recorded for {sensor.name}")
        return rows[-1][0]

    def find_index_by_timestamp(self, sensor: Sensor, start: int, timestamp: str) -> int:
        """First row at or after ``start`` within the sensor's tolerance of ``timestamp``.

        When no row matches, ``start`` is returned, except for LiDAR where 0 is.
        """
        sensor = Sensor(sensor)
        if start < 0:
            raise ValueError(f"negative start index {start}")
        target = clock_value(timestamp)
        tolerance = _MATCH_TOLERANCE[sensor]
        rows = self.rows(sensor)
        for index, row in enumerate(rows[start:], start=start):
            if abs(target - clock_value(row[0])) <= tolerance:
                return index
        return 0 if sensor is Sensor.LIDAR else start

    def find_start_index(self, sensor: Sensor) -> int:
        """First row strictly after the common start clock and within tolerance of it.

        Returns 0 when no row qualifies.
        """
        sensor = Sensor(sensor)
        tolerance = _START_TOLERANCE[sensor]
        for index, row in enumerate(self.rows(sensor)):
            ahead = clock_value(row[0]) - self.start_clock
            if 0 < ahead <= tolerance:
                return index
        return 0

    def latest_started(self) -> str:
        """Timestamp of the sensor whose recording began last; ties favour earlier sensors."""
        latest = None
        best = 0
        for sensor in Sensor:
            value = clock_value(self._first_timestamp(sensor))
            if latest is None or value > best:
                latest, best = sensor, value
        self.latest_sensor = latest
        return self._first_timestamp(latest)

    def earliest_ended(self) -> str:
        """Timestamp of the sensor whose recording ended first; ties favour earlier sensors."""
        earliest = None
        best = 0
        for sensor in Sensor:
            value = clock_value(self._last_timestamp(sensor))
            if earliest is None or value < best:
                earliest, best = sensor, value
        self.earliest_sensor = earliest
        return self._last_timestamp(earliest)

    def number_of_frames(self) -> int:
        """Number of GPS frames between the common start and the earliest end.

        Also records the last usable GPS row in ``gps_last``.
        """
        gps_start = self.find_start_index(Sensor.GPS)
        last_timestamp = self.earliest_ended()
        gps_last = self.find_index_by_timestamp(Sensor.GPS, gps_start, last_timestamp)
        if gps_last == len(self.rows(Sensor.GPS)) - 1:
            gps_last -= 1
        self.gps_last = gps_last
        return gps_last - gps_start

    def start_indexes(self) -> dict[Sensor, int]:
        """Fix the common start clock and return every sensor's first aligned row."""
        self.start_clock = clock_value(self.latest_started())
        return {sensor: self.find_start_index(sensor) for sensor in Sensor}