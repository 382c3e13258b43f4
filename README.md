# divasync

`divasync` lines up the recordings of a vehicle's sensors (GPS, camera,
LiDAR, IMU and CAN) on a common clock and writes a set of JSON tables that
describe the drive as scenes of up to 200 frames. It needs nothing beyond the
Python standard library.

## Input layout

A session directory holds one sub-directory per sensor:

```
<session>/
    GPS/    CAM/    LiDAR/    IMU/    CAN/
```

In each sub-directory, the file used is the most recently modified entry
whose name contains `i30`. Hidden entries are ignored, and when several
entries have the same modification time the alphabetically first name is
used. A sensor directory that cannot be listed or has no such file raises
`FileNotFoundError`.

Each file is read as comma-separated rows. Every row starts with a timestamp
of the form `YYYYMMDDhhmmssSSS`. Only the `hhmmssSSS` part is used for
alignment (see `divasync.sync.clock_value`). The other columns depend on the
sensor:

| Sensor | Columns after the timestamp                                  |
|--------|--------------------------------------------------------------|
| GPS    | latitude, longitude (degrees and minutes, `DDDMM.mmmm`), HDOP |
| IMU    | scaled acceleration x, y, z                                  |
| CAN    | handle angle, turn light, vehicle speed, gear                |
| CAM    | none used                                                    |
| LiDAR  | none used                                                    |

## How alignment works

- The synchronised range starts at the sensor whose first row is latest. For
  each sensor, the start index is the first row that lies strictly after that
  clock and within a tolerance of it. The tolerances are GPS 110, CAM 60,
  LiDAR 110, IMU 45 and CAN 60 (in `hhmmssSSS` units).
- The range ends at the sensor whose last row is earliest. The matching GPS
  row becomes the last frame, and it is moved back by one if it is the final
  GPS row.
- GPS rows drive the frames. For every frame, each other sensor is matched to
  its first row, from its current position on, that lies within a tolerance
  of the GPS timestamp. The tolerances are CAM 60, LiDAR 110, IMU 110 and
  CAN 260.

## Output

All tables are written to `<session>/JSON/` as indented JSON arrays with
sorted keys. `sensor.json` is replaced on each run. Every other table is
extended rather than replaced, so several runs collect into the same dataset.

- `sensor.json`: one entry per sensor slot (`sensor_token`, `Sensor`). Slot 0
  is a `"NULL"` placeholder, so a sensor's entry sits at its number in
  `Sensor`.
- `log.json`: one entry per run (`token`, `vehicle`, `date_captured`,
  `location`).
- `frame.json`: one frame per aligned GPS row (`frame index = `,
  `frame_token`, `timestamp`, `token_prev`, `token_next`). Frames are chained
  within each scene.
- `scene.json`: one entry per block of up to 200 frames (`scene_token`,
  `log_token`, `nbr_frames`, `first_frame_token`, `last_frame_token`).
- `lidar_data.json`, `cam_data.json`: the matching `LiDAR_<timestamp>.pcd` or
  `CAM_<timestamp>.jpg` file name for each frame.
- `gps_data.json`: latitude and longitude in decimal degrees, formatted to six
  places, and HDOP for each frame.
- `imu_data.json`: `scaledaccelx`, `scaledaccely` and `scaledaccelz` for each
  frame.
- `can_data.json`: `handleAngle`, `turnLight`, `vehicleSpeed` and `gear` for
  each frame.

Tokens are 16 random lowercase hexadecimal digits. `date_captured` is the
year, the unpadded month and the two-digit day, followed by `_` and the
entry's position in `log.json`.

## Command line

```
divasync [BASE] [--session DIR]
```

With no arguments, the command processes `<BASE>/<date>_0` for today's date.
`BASE` defaults to `~/DIVA2/diva2-server/DIVA2_DATA`. Use `--session DIR` to
process a given session directory instead. The command creates the `JSON/`
directory if needed. On a missing file or bad data it prints the error to
standard error and exits with status 1.

## Python

```python
from divasync.cli import run

builder = run("/data/drives/20240101_0")
print(builder.frame_count, builder.scene_count)
```

`run` uses the steps below, which can also be called one by one:

```python
from divasync.dataset import DatasetBuilder
from divasync.sensordata import (
    write_cam_data, write_can_data, write_gps_data, write_imu_data, write_lidar_data,
)

builder = DatasetBuilder("/data/drives/20240101_0")
builder.write_sensors(5)
builder.write_log(0)          # 0: "i30", 1: "n004"
builder.write_frames()
builder.write_scenes()
write_lidar_data(builder)
write_cam_data(builder)
write_gps_data(builder)
write_imu_data(builder)
write_can_data(builder)
```

The order matters. `write_scenes` needs `write_log`, and the sensor-data
writers need `write_sensors`, `write_frames` and `write_scenes`.
`DatasetBuilder` also accepts:

- a ready-made `SensorIndex`;
- a `random.Random` as `rng`, which makes the tokens reproducible;
- a `datetime` as `now`, which is used for `date_captured`.

Lower-level helpers:

```python
from divasync.readfiles import Sensor, latest_sensor_file, read_csv, read_txt
from divasync.sync import SensorIndex, clock_value
from divasync.sensordata import degrees_minutes_to_decimal
from divasync.tokens import generate_token, date_stamp

index = SensorIndex.from_directory("/data/drives/20240101_0")
print(index.start_indexes())     # {Sensor.GPS: ..., Sensor.CAM: ..., ...}
print(index.number_of_frames())  # also sets index.gps_last

print(clock_value("20240101123456789"))      # 123456789
print(degrees_minutes_to_decimal(3458.17997))
```

## What it does not do

`divasync` only works on recordings already on disk. It does not read from
the sensors, it does not send data to a server, and it does not store
anything other than the JSON files described above.

## Tests

```
pip install -e ".[test]"
pytest
```