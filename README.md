# m8mouse

m8mouse is a small command-line tool for M8-style gaming mice that show up on
USB as `1bcf:08a0`. It reads the settings of these mice and can change them.
It talks to the mouse directly with HID feature reports through Linux's
hidraw interface. It needs nothing apart from Python itself.

It shows:

- the active **DPI mode** (one of six slots),
- the **DPI resolution** stored in each of the six slots,
- the **LED mode** (DPI, Multicolour, Rainbow, Flow, Waltz, Four Seasons, Off),
- the **LED speed** (1 to 8).

It can change the DPI mode, the LED mode and the LED speed.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Usage

Show the current settings of the connected mouse:

```
m8mouse
```

List every known mode and value. This works without a mouse:

```
m8mouse -l
```

Change settings. Every index starts at 1 and refers to the lists that
`m8mouse -l` prints. You can combine the options:

```
m8mouse -dpi 3
m8mouse -led 2 -speed 5
m8mouse -dpi 1 -led 7
```

When you change settings, the tool works in three steps:

1. It reads the mouse's memory and prints its state.
2. It writes the changed memory back.
3. It reads the memory again and prints the state, so you can check the
   result.

If an index is not one of the known modes, the tool logs an error and writes
nothing. It still exits with status 0.

### Options

| Option      | Meaning                                                        |
|-------------|----------------------------------------------------------------|
| `-l`        | list the known modes and values                                |
| `-dpi D`    | set the active DPI mode to index `D`                           |
| `-led L`    | set the LED mode to index `L`                                  |
| `-speed S`  | set the LED speed to index `S`                                 |
| `-g`        | log warnings and errors to stderr                              |
| `-g1`       | log informational messages to stderr as well                   |
| `-g2`       | log informational messages to stderr, and everything down to trace level into `m8debug-YYYYmmdd-HHMMSS.log` in the current directory |
| `-h`        | show the help message                                          |

Without `-g`, `-g1` or `-g2`, the tool logs only fatal messages.

The tool prints the usage text and exits with status 1 in these cases:

- an option is not recognised,
- `-h` is given,
- a set option is given without a usable value (a missing value or `0`).

## Permissions

The tool finds the mouse through `/sys/class/hidraw` and opens its
`/dev/hidraw*` node. An ordinary user usually cannot open that node. There
are two ways around this:

- run the tool with `sudo`, or
- add a udev rule that grants access to device `1bcf:08a0`, for example with
  the `uaccess` tag, and then reconnect the mouse.

If the mouse cannot be found or opened, the tool says so and exits with
status 1.

## Using it from Python

```python
from m8mouse.device import M8Mouse
from m8mouse.hidraw import HidrawDevice
from m8mouse.modes import ModeKind

with HidrawDevice.open(0x1BCF, 0x08A0, "/sys/class/hidraw") as transport:
    mouse = M8Mouse(transport)
    mouse.query()
    print(mouse.active_mode(ModeKind.LED))
    mouse.set_modes(dpi=2, led=None, speed=None)  # zero-based; None or -1 leaves a setting alone
    mouse.update()
```

These are the main pieces:

- `m8mouse.device.M8Mouse` drives the mouse:
  - `query()` downloads the mouse's memory and reads the settings.
  - `set_modes()` changes the settings in memory.
  - `update()` writes the memory back to the mouse.
  - `active_mode()` and `dpi_resolution()` report the settings that were
    read.
  - `query()` raises `UnsupportedDeviceError` if the memory holds settings
    it does not recognise. `update()` refuses to run until a `query()` has
    succeeded.
- `m8mouse.device.all_modes()` returns the table of known modes of a kind.
  `m8mouse.modes.modes_for()` does the same.
- `m8mouse.protocol.Session` runs the exchanges:
  - the handshake,
  - the download,
  - the upload,
  - the hangup.

  It runs them over any object that provides `send_feature_report` and
  `get_feature_report`, as described by `m8mouse.protocol.Transport`. This
  lets you drive the protocol against a simulated device. Failed exchanges
  raise `ProtocolError`, `SendError` or `ReceiveError`.
- `m8mouse.memory.DeviceMemory` holds the downloaded memory. `dump()`
  returns it as a hex listing.
- `m8mouse.cli` provides the functions that build the command's output:
  - `format_state()`,
  - `format_modes()`,
  - `format_single_mode()`,
  - `usage()`.

  `parse_args()` reads the command line and `main()` runs the command.
- `m8mouse.logsetup.configure_logging()` sets up the console and log-file
  output.

## What it does not do

- It does not change the DPI resolution stored in each slot. It only reads
  and shows it.
- It only reaches the mouse through Linux's hidraw interface. It does not
  work on other operating systems.
- It does not install udev rules.