[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "divasync"
version = "0.1.0"
description = "Align GPS, camera, LiDAR, IMU and CAN recordings on a common clock and index them as JSON scene tables"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "sensor-fusion",
    "time-synchronization",
    "gps",
    "lidar",
    "imu",
    "can-bus",
    "dataset",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Information Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
divasync = "divasync.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["divasync"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
