# homethings

A small set of home automation tools. Each tool reads from, or writes to, a
device in the house, and each can turn itself into a Web of Things device: a
small HTTP server describing the device and its properties as JSON, kept up
to date in the background.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Configuration

Every tool reads a TOML configuration file from the user's configuration
directory, for instance `weather/weather.toml`. If the file does not exist,
it is created with default values. Each tool prints the path of its
configuration file with `--print-config-path` (`-c`), then exits. Options
given on the command line take precedence over the configuration file.

## Tools

### `weather`

Reads the current weather and the hourly forecast for the home location and
prints them.

```
weather --openweathermap-api-key placeholder
weather --into-thing --thing-port 8080
```

With `--into-thing` (`-t`), it serves two Things, *Current Weather* and
*Forecast*, refreshed every 30 minutes.

### `lights`

Sends a signal to a light through the lights controller, reachable over TCP.

```
lights --address 192.168.1.42:23 --subject Kitchen --action Pulse
lights --into-thing
```

`--subject` is case-insensitive and defaults to `LivingRoom`; `--action`
defaults to `Pulse`. With `--into-thing`, every light is served as a Thing
whose `pulse` property sends a pulse when it is written.

### `alfen`

Reads values from, or writes values to, an Alfen charging station over
Modbus TCP.

```
alfen --address 192.168.1.142:502 read
alfen read --format Json
alfen read --into-thing --thing-port 8081
alfen write --socket-current 16
```

`read --into-thing` serves a *Car Charging Station* Thing, refreshed every
10 seconds. `write --socket-current` refuses a current equal to or above the
station's maximum current.

## Library use

The pieces behind the tools can be used on their own, for example:

- `homethings.weather.state.State.from_json` parses a weather report;
- `homethings.alfen.reader.read` reads the whole state of a charging station
  from a `homethings.alfen.modbus.ModbusClient`;
- `homethings.kia.vehicles.parse_state_response` parses a vehicle status
  response into a `homethings.kia.vehicles.State`, and
  `homethings.kia.units` converts its distances and temperatures;
- `homethings.webthing.Thing` and `homethings.webthing.ThingServer` build and
  serve Web of Things descriptions.

## What this package does not do

- There is no tool for the tanks: `homethings.tanks` holds no modules, and
  nothing listens for reports from the tanks.
- There is no vehicle tool: `homethings.kia` only parses status responses
  given to it. It does not log in to an account, fetch vehicles or their
  state, or serve a vehicle as a Thing.