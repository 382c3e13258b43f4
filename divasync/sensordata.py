"""Per-sensor data tables aligned to the frames of a capture session."""

from __future__ import annotations

import math
import os
import re
from collections.abc import Iterator
from typing import Any

from .dataset import FRAMES_PER_SCENE, DatasetBuilder, load_json_list, save_json_list
from .readfiles import Sensor

_LEADING_FLOAT = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _parse_float(text: str) -> float:
    """Parse the leading number of ``text``, ignoring anything after it."""
    match = _LEADING_FLOAT.match(text)
    if match is None:
        raise ValueError(f"not a number: {text!r}")
    return float(match.group())


def degrees_minutes_to_decimal(raw: float) -> float:
    """Convert a DDDMM.mmmm coordinate to decimal degrees."""
    degrees = math.trunc(raw / 100)
    minutes = raw - degrees * 100
    return degrees + minutes / 60


def _aligned_gps_rows(builder: DatasetBuilder) -> Iterator[int]:
    """GPS row indexes covered by the session's scenes, in order."""
    scene_first = builder.gps_start
    gps_idx = builder.gps_start
    for _ in range(builder.scene_total):
        while (
            gps_idx <= scene_first + FRAMES_PER_SCENE - 1
            and gps_idx <= builder.gps_last
        ):
            yield gps_idx
            gps_idx += 1
        if gps_idx > scene_first + FRAMES_PER_SCENE - 1:
            scene_first = gps_idx


def _frame_token(builder: DatasetBuilder, position: int) -> str:
    if not 0 <= position < len(builder.frames):
        raise IndexError(f"no frame at position {position}")
    return builder.frames[position]["frame_token"]


def _sensor_token(builder: DatasetBuilder, sensor: Sensor) -> str:
    if len(builder.sensors) <= sensor:
        raise RuntimeError("write_sensors must run before sensor data is written")
    return builder.sensors[sensor]["sensor_token"]


def _append_table(path: str | os.PathLike, entries: list[dict[str, Any]]) -> int:
    """Append ``entries`` to the JSON array at ``path``; return its former length."""
    table = load_json_list(path)
    previous = len(table)
    table.extend(entries)
    save_json_list(path, table)
    return previous


def write_lidar_data(builder: DatasetBuilder) -> list[dict[str, Any]]:
    """Append one LiDAR record per aligned frame to ``lidar_data.json``."""
    index = builder.index
    rows = index.rows(Sensor.LIDAR)
    lidar_idx = builder.starts[Sensor.LIDAR]
    cursor = builder.frame_start
    entries = []
    for gps_idx in _aligned_gps_rows(builder):
        gps_ts = index.timestamp(Sensor.GPS, gps_idx)
        lidar_idx = index.find_index_by_timestamp(Sensor.LIDAR, lidar_idx, gps_ts)
        if lidar_idx < len(rows):
            timestamp = index.timestamp(Sensor.LIDAR, lidar_idx)
            entries.append(
                {
                    "token": _frame_token(builder, cursor),
                    "sensor_token": _sensor_token(builder, Sensor.LIDAR),
                    "filename": f"LiDAR_{timestamp}.pcd",
                    "fileformat": "pcd",
                    "timestamp": timestamp,
                }
            )
        cursor += 1
    builder.frame_start = cursor
    builder.frame_data_start = _append_table(
        builder.json_dir / "lidar_data.json", entries
    )
    return entries


def write_cam_data(builder: DatasetBuilder) -> list[dict[str, Any]]:
    """Append one camera record per aligned frame to ``cam_data.json``.

    Frame tokens are taken from the first frame of ``frame.json`` onwards.
    """
    index = builder.index
    rows = index.rows(Sensor.CAM)
    cam_idx = builder.starts[Sensor.CAM]
    cursor = 0
    entries = []
    for gps_idx in _aligned_gps_rows(builder):
        gps_ts = index.timestamp(Sensor.GPS, gps_idx)
        cam_idx = index.find_index_by_timestamp(Sensor.CAM, cam_idx, gps_ts)
        if cam_idx < len(rows):
            timestamp = index.timestamp(Sensor.CAM, cam_idx)
            entries.append(
                {
                    "token": _frame_token(builder, cursor),
                    "sensor_token": _sensor_token(builder, Sensor.CAM),
                    "filename": f"CAM_{timestamp}.jpg",
                    "fileformat": "jpg",
                    "timestamp": timestamp,
                }
            )
        cursor += 1
    builder.frame_start = cursor
    builder.frame_data_start = _append_table(builder.json_dir / "cam_data.json", entries)
    return entries


def write_gps_data(builder: DatasetBuilder) -> list[dict[str, Any]]:
    """Append one position record per aligned frame to ``gps_data.json``."""
    index = builder.index
    cursor = 0
    entries = []
    for gps_idx in _aligned_gps_rows(builder):
        row = index.rows(Sensor.GPS)[gps_idx]
        latitude = degrees_minutes_to_decimal(_parse_float(row[1]))
        longitude = degrees_minutes_to_decimal(_parse_float(row[2]))
        entries.append(
            {
                "token": _frame_token(builder, cursor),
                "sensor_token": _sensor_token(builder, Sensor.GPS),
                "timestamp": index.timestamp(Sensor.GPS, gps_idx),
                "latitude": f"{latitude:.6f}",
                "longitude": f"{longitude:.6f}",
                "HorizontalDilutionOfPrecision": row[3],
            }
        )
        cursor += 1
    builder.frame_start = cursor
    _append_table(builder.json_dir / "gps_data.json", entries)
    return entries


def write_imu_data(builder: DatasetBuilder) -> list[dict[str, Any]]:
    """Append one acceleration record per aligned frame to ``imu_data.json``."""
    index = builder.index
    imu_idx = builder.starts[Sensor.IMU]
    cursor = 0
    entries = []
    for gps_idx in _aligned_gps_rows(builder):
        gps_ts = index.timestamp(Sensor.GPS, gps_idx)
        imu_idx = index.find_index_by_timestamp(Sensor.IMU, imu_idx, gps_ts)
        row = index.rows(Sensor.IMU)[imu_idx]
        entries.append(
            {
                "token": _frame_token(builder, cursor),
                "sensor_token": _sensor_token(builder, Sensor.IMU),
                "timestamp": index.timestamp(Sensor.IMU, imu_idx),
                "scaledaccelx": row[1],
                "scaledaccely": row[2],
                "scaledaccelz": row[3],
            }
        )
        cursor += 1
    builder.frame_start = cursor
    _append_table(builder.json_dir / "imu_data.json", entries)
    return entries


def write_can_data(builder: DatasetBuilder) -> list[dict[str, Any]]:
    """Append one vehicle-bus record per aligned frame to ``can_data.json``."""
    index = builder.index
    can_idx = builder.starts[Sensor.CAN]
    cursor = 0
    entries = []
    for gps_idx in _aligned_gps_rows(builder):
        gps_ts = index.timestamp(Sensor.GPS, gps_idx)
        can_idx = index.find_index_by_timestamp(Sensor.CAN, can_idx, gps_ts)
        row = index.rows(Sensor.CAN)[can_idx]
        entries.append(
            {
                "token": _frame_token(builder, cursor),
                "sensor_token": _sensor_token(builder, Sensor.CAN),
                "timestamp": index.timestamp(Sensor.CAN, can_idx),
                "handleAngle": row[1],
                "turnLight": row[2],
                "vehicleSpeed": row[3],
                "gear": row[4],
            }
        )
        cursor += 1
    builder.frame_start = cursor
    _append_table(builder.json_dir / "can_data.json", entries)
    return entries