"""Building the log, sensor, frame and scene tables of a capture session."""

from __future__ import annotations

import json
import os
import random
from datetime import datetime
from pathlib import Path
from typing import Any

from .readfiles import Sensor
from .sync import SensorIndex
from .tokens import date_stamp, generate_token

FRAMES_PER_SCENE = 200
VEHICLES = ("i30", "n004")
LOCATION = "Incheon, South Korea"

_SENSOR_NAMES = {
    Sensor.GPS: "GPS",
    Sensor.CAM: "CAM",
    Sensor.LIDAR: "LiDAR",
    Sensor.IMU: "IMU",
    Sensor.CAN: "CAN",
}


def load_json_list(path: str | os.PathLike) -> list[Any]:
    """Load a JSON array from ``path``; a missing file or a null gives an empty list."""
    path = Path(path)
    if not path.exists():
        return []
    with open(path, encoding="utf-8") as handle:
        value = json.load(handle)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{path} does not hold a JSON array")
    return value


def save_json_list(path: str | os.PathLike, items: list[Any]) -> None:
    """Write ``items`` as an indented JSON array with sorted keys."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(
        items, indent=3, separators=(",", " : "), sort_keys=True, ensure_ascii=False
    )
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text + "\n")


def _scene_count(frame_count: int) -> int:
    quotient, remainder = divmod(abs(frame_count), FRAMES_PER_SCENE)
    if frame_count < 0:
        return -quotient
    return quotient + (1 if remainder else 0)


class DatasetBuilder:
    """Accumulates the JSON tables of one session and writes them under ``JSON/``."""

    def __init__(
        self,
        directory: str | os.PathLike,
        index: SensorIndex | None = None,
        *,
        rng: random.Random | None = None,
        now: datetime | None = None,
    ) -> None:
        self.directory = Path(directory)
        self.index = index if index is not None else SensorIndex.from_directory(self.directory)
        self.rng = rng if rng is not None else random.Random()
        self.now = now

        self.starts = self.index.start_indexes()
        self.gps_start = self.starts[Sensor.GPS]
        self.frame_count = self.index.number_of_frames()
        self.gps_last = self.index.gps_last
        self.scene_count = _scene_count(self.frame_count)
        self.cam_sensors = 2

        self.frame_start = 0
        self.log_start = 0
        self.frame_data_start = 0
        self.scene_total = 0

        self.sensors: list[dict[str, Any]] = []
        self.logs: list[dict[str, Any]] = []
        self.frames: list[dict[str, Any]] = []
        self.scenes: list[dict[str, Any]] = []

    @property
    def json_dir(self) -> Path:
        """Directory the tables are written to."""
        return self.directory / "JSON"

    def _token(self) -> str:
        return generate_token(self.rng)

    def _frame_token(self, position: int) -> str:
        if not 0 <= position < len(self.frames):
            raise IndexError(f"no frame at position {position}")
        return self.frames[position]["frame_token"]

    def write_sensors(self, sensor_count: int) -> list[dict[str, Any]]:
        """Add one entry per sensor slot 0..sensor_count and write ``sensor.json``."""
        written = []
        for slot in range(sensor_count + 1):
            token = self._token()
            try:
                name = _SENSOR_NAMES[Sensor(slot)]
            except ValueError:
                name = token = "NULL"
            written.append({"sensor_token": token, "Sensor": name})
        self.sensors.extend(written)
        save_json_list(self.json_dir / "sensor.json", self.sensors)
        return written

    def write_log(self, car_id: int) -> dict[str, Any]:
        """Append this session's log entry to ``log.json`` and return it."""
        if not 0 <= car_id < len(VEHICLES):
            raise ValueError(f"unknown car id {car_id}")
        path = self.json_dir / "log.json"
        self.logs = load_json_list(path)
        self.log_start = len(self.logs)
        entry = {
            "token": self._token(),
            "vehicle": VEHICLES[car_id],
            "date_captured": f"{date_stamp(self.now)}_{self.log_start}",
            "location": LOCATION,
        }
        self.logs.append(entry)
        save_json_list(path, self.logs)
        return entry

    def write_frames(self) -> None:
        """Append one frame per aligned GPS row to ``frame.json``, chained per scene."""
        path = self.json_dir / "frame.json"
        self.frames = load_json_list(path)
        self.frame_start = len(self.frames)

        scene_first = self.gps_start
        frame_idx = self.gps_start
        for _ in range(self.scene_count):
            token_prev = ""
            token_curr = self._token()
            while True:
                if frame_idx > scene_first + FRAMES_PER_SCENE - 1:
                    scene_first = frame_idx
                    break
                if frame_idx > self.gps_last:
                    break
                timestamp = self.index.timestamp(Sensor.GPS, frame_idx)
                token_next = self._token()
                ends_chain = (
                    frame_idx == scene_first + FRAMES_PER_SCENE - 1
                    or frame_idx == self.gps_last
                )
                self.frames.append(
                    {
                        "frame index = ": frame_idx,
                        "frame_token": token_curr,
                        "timestamp": timestamp,
                        "token_prev": token_prev,
                        "token_next": "" if ends_chain else token_next,
                    }
                )
                token_prev, token_curr = token_curr, token_next
                frame_idx += 1

        save_json_list(path, self.frames)

    def write_scenes(self) -> None:
        """Append one scene per block of frames to ``scene.json``."""
        if not 0 <= self.log_start < len(self.logs):
            raise RuntimeError("write_log must run before write_scenes")
        path = self.json_dir / "scene.json"
        self.scenes = load_json_list(path)

        log_token = self.logs[self.log_start]["token"]
        end = self.frame_start + self.frame_count + 1
        scene_idx = self.frame_start
        frames = FRAMES_PER_SCENE
        for _ in range(self.scene_count):
            self.scene_total += 1
            scene_token = self._token()
            is_last = end - scene_idx < FRAMES_PER_SCENE
            if is_last:
                frames = end - scene_idx
            self.scenes.append(
                {
                    "scene_token": scene_token,
                    "log_token": log_token,
                    "nbr_frames": frames,
                    "first_frame_token": self._frame_token(scene_idx),
                    "last_frame_token": self._frame_token(scene_idx + frames - 1),
                }
            )
            scene_idx += FRAMES_PER_SCENE
            if is_last:
                break

        save_json_list(path, self.scenes)