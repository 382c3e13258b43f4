import json
import random
from datetime import datetime

import pytest

from divasync.dataset import (
    DatasetBuilder,
    load_json_list,
    save_json_list,
)
from divasync.readfiles import Sensor
from divasync.sync import SensorIndex
from divasync.tokens import date_stamp

BASE = 120000000


def _ts(clock):
    return f"20210305{clock:09d}"


def _table(offsets):
    return [[_ts(BASE + offset), "0"] for offset in offsets]


def make_index(gps_rows):
    stop = 100 * gps_rows
    regular = range(0, stop, 100)
    return SensorIndex(
        tables={
            Sensor.GPS: _table(regular),
            Sensor.CAM: _table(range(50, stop, 100)),
            Sensor.LIDAR: _table(regular),
            Sensor.IMU: _table(regular),
            Sensor.CAN: _table(regular),
        }
    )


def make_builder(tmp_path, gps_rows=10, seed=3):
    return DatasetBuilder(
        tmp_path,
        make_index(gps_rows),
        rng=random.Random(seed),
        now=datetime(2021, 3, 5),
    )


def test_load_missing_file_is_empty(tmp_path):
    assert load_json_list(tmp_path / "absent.json") == []


def test_load_null_is_empty(tmp_path):
    path = tmp_path / "null.json"
    path.write_text("null")
    assert load_json_list(path) == []


def test_load_object_is_rejected(tmp_path):
    path = tmp_path / "obj.json"
    path.write_text('{"a": 1}')
    with pytest.raises(ValueError):
        load_json_list(path)


def test_save_and_load_round_trip(tmp_path):
    items = [{"b": "x", "a": 2}, {"c": [1, 2]}]
    path = tmp_path / "sub" / "items.json"
    save_json_list(path, items)
    assert load_json_list(path) == items


def test_save_uses_styled_layout(tmp_path):
    path = tmp_path / "x.json"
    save_json_list(path, [{"a": 1}])
    assert path.read_text() == '[\n   {\n      "a" : 1\n   }\n]\n'


def test_sensors_table(tmp_path):
    builder = make_builder(tmp_path)
    written = builder.write_sensors(5)
    assert [entry["Sensor"] for entry in written] == [
        "NULL", "GPS", "CAM", "LiDAR", "IMU", "CAN",
    ]
    assert written[0]["sensor_token"] == "NULL"
    assert all(len(entry["sensor_token"]) == 16 for entry in written[1:])
    assert load_json_list(tmp_path / "JSON" / "sensor.json") == builder.sensors


def test_sensor_keys_sorted_in_file(tmp_path):
    builder = make_builder(tmp_path)
    builder.write_sensors(1)
    text = (tmp_path / "JSON" / "sensor.json").read_text()
    assert text.index('"Sensor"') < text.index('"sensor_token"')


def test_log_entry(tmp_path):
    builder = make_builder(tmp_path)
    entry = builder.write_log(0)
    assert entry["vehicle"] == "i30"
    assert entry["location"] == "Incheon, South Korea"
    assert entry["date_captured"] == f"{date_stamp(datetime(2021, 3, 5))}_0"
    assert load_json_list(tmp_path / "JSON" / "log.json") == [entry]


def test_log_appends_to_existing(tmp_path):
    make_builder(tmp_path).write_log(0)
    second = make_builder(tmp_path, seed=9)
    entry = second.write_log(1)
    assert second.log_start == 1
    assert entry["date_captured"].endswith("_1")
    assert len(load_json_list(tmp_path / "JSON" / "log.json")) == 2


def test_log_rejects_unknown_car(tmp_path):
    with pytest.raises(ValueError):
        make_builder(tmp_path).write_log(2)


def test_frames_cover_aligned_gps_rows(tmp_path):
    builder = make_builder(tmp_path)
    builder.write_frames()
    frames = builder.frames
    assert len(frames) == builder.gps_last - builder.gps_start + 1
    assert [f["frame index = "] for f in frames] == list(
        range(builder.gps_start, builder.gps_last + 1)
    )
    assert frames[0]["timestamp"] == builder.index.timestamp(Sensor.GPS, builder.gps_start)
    assert load_json_list(tmp_path / "JSON" / "frame.json") == frames


def test_frames_form_a_chain(tmp_path):
    builder = make_builder(tmp_path)
    builder.write_frames()
    frames = builder.frames
    assert frames[0]["token_prev"] == ""
    assert frames[-1]["token_next"] == ""
    for earlier, later in zip(frames, frames[1:]):
        assert earlier["token_next"] == later["frame_token"]
        assert later["token_prev"] == earlier["frame_token"]


def test_frames_deterministic_with_seed(tmp_path):
    first = make_builder(tmp_path / "a", seed=5)
    second = make_builder(tmp_path / "b", seed=5)
    first.write_frames()
    second.write_frames()
    assert first.frames == second.frames


def test_scene_spans_all_frames(tmp_path):
    builder = make_builder(tmp_path)
    builder.write_log(0)
    builder.write_frames()
    builder.write_scenes()
    assert len(builder.scenes) == 1
    scene = builder.scenes[0]
    assert scene["nbr_frames"] == len(builder.frames)
    assert scene["first_frame_token"] == builder.frames[0]["frame_token"]
    assert scene["last_frame_token"] == builder.frames[-1]["frame_token"]
    assert scene["log_token"] == builder.logs[0]["token"]
    assert builder.scene_total == 1
    stored = json.loads((tmp_path / "JSON" / "scene.json").read_text())
    assert stored == builder.scenes


def test_multiple_scenes_split_frames(tmp_path):
    builder = make_builder(tmp_path, gps_rows=450)
    builder.write_log(0)
    builder.write_frames()
    builder.write_scenes()
    assert len(builder.scenes) == builder.scene_count
    assert sum(s["nbr_frames"] for s in builder.scenes) == len(builder.frames)
    assert all(s["nbr_frames"] <= 200 for s in builder.scenes)
    by_token = {}
    for frame in builder.frames:
        by_token.setdefault(frame["frame_token"], frame)
    for scene in builder.scenes:
        assert by_token[scene["first_frame_token"]]["token_prev"] == ""
        assert by_token[scene["last_frame_token"]]["token_next"] == ""


def test_scenes_require_log(tmp_path):
    builder = make_builder(tmp_path)
    builder.write_frames()
    with pytest.raises(RuntimeError):
        builder.write_scenes()