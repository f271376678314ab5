[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "m8mouse"
version = "0.1.0"
description = "Read and change the DPI and LED settings of M8 gaming mice (1bcf:08a0) over HID feature reports"
requires-python = ">=3.10"
dependencies = []
keywords = ["mouse", "hid", "hidraw", "dpi", "led", "gaming mouse", "usb"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
m8mouse = "m8mouse.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["m8mouse"]

[tool.hatch.build.targets.sdist]
include = ["m8mouse", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
