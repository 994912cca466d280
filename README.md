# gpudeviceconfig

A configuration library for a GPU device plugin and a GPU
feature-discovery service on Kubernetes nodes.

The package does two things:

* **It parses and validates the versioned (`v1`) configuration file** that the
  device plugin and feature discovery share. The file can be YAML or JSON. It
  covers the command-line flags, the resource naming patterns and the
  time-slicing (GPU sharing) settings.
* **It merges that file with command-line settings.** A setting given
  explicitly wins over the file. Anything the file leaves unset takes the
  command-line default.

## Installation

```
pip install gpudeviceconfig
```

Python 3.10 or newer is required. The only dependency is PyYAML.

## The configuration file

```yaml
version: v1
flags:
  migStrategy: none          # none | single | mixed
  failOnInitError: true
  plugin:
    passDeviceSpecs: false
    deviceListStrategy: envvar        # a single value or a list
    deviceIDStrategy: uuid            # uuid | index
  gfd:
    oneshot: false
    sleepInterval: 60s
sharing:
  timeSlicing:
    renameByDefault: false
    resources:
    - name: nvidia.com/gpu
      replicas: 4
      devices: all           # "all", a positive count, or a list of device refs
```

Rules for the file:

* A missing `version` is taken as `v1`. Any other version is rejected.
* `sleepInterval` takes a duration string such as `"5s"` or `"1m30s"`, or a
  bare number of nanoseconds.
* A device list may hold GPU indices (`0`), MIG indices (`0:1`), GPU UUIDs
  (`GPU-…`) and MIG UUIDs (`MIG-…` or `MIG-GPU-…/<gi>/<ci>`).
* Each time-sliced resource needs `replicas` of at least 2. A resource with no
  `devices` entry covers all devices.
* When `renameByDefault` is true, a resource without `rename` is renamed to
  its name with `.shared` appended.
* Resource names get the `nvidia.com/` prefix when it is missing. The full
  name may be at most 63 characters long, and the part after the prefix must
  be a valid lowercase DNS subdomain.

Loading a file:

```python
from gpudeviceconfig.config import parse_config

config = parse_config("/etc/gpu/config.yaml")
print(config.to_json())
```

`parse_config_from(reader)` does the same for any open text or binary stream.
`new_config(values, explicitly_set, config_file)` builds the final
configuration. It loads `config_file` (or the `config-file` entry of `values`
when `config_file` is None) and then applies the command-line `values`. A
value is taken when its name is in `explicitly_set` or when the file left
that field unset.

Malformed or invalid input raises `ValueError` with a message that describes
the problem.

## Building blocks

```python
from gpudeviceconfig.consts import DeviceListStrategies
from gpudeviceconfig.duration import parse_duration, format_duration
from gpudeviceconfig.replicas import ReplicatedDevices, ReplicatedDeviceRef, TimeSlicing
from gpudeviceconfig.resources import new_resource_name, ResourcePattern

strategies = DeviceListStrategies(["envvar", "cdi-annotations"])
strategies.includes("envvar")        # True
strategies.is_cdi_enabled()          # True

parse_duration("5s")                 # Duration(5000000000), in nanoseconds
format_duration(5)                   # "5ns"

ReplicatedDeviceRef("0:0").is_mig_index()   # True
ReplicatedDevices.loads('"all"')            # ReplicatedDevices(all=True, ...)
TimeSlicing.loads('{"resources": [{"name": "gpu", "replicas": 2}]}')

new_resource_name("gpu")             # "nvidia.com/gpu"
ResourcePattern("*A100*").matches("NVIDIA A100-SXM4-40GB")   # True
```

Each configuration class (`Config`, `Flags`, `Resources`, `Sharing`,
`TimeSlicing` and the rest) has `from_json` to build it from decoded JSON
and `to_json` to turn it back into plain data.

### Device plugin settings

`gpudeviceconfig.plugin_config` prepares the configuration for the device
plugin:

* `load_plugin_config(values, explicitly_set, config_file)` fills in the
  plugin's flag defaults, builds the config and validates it. It then drops
  the feature-discovery flags.
* `validate_plugin_flags(config)` checks the device list strategy and the
  device ID strategy, and returns the `DeviceListStrategies`.
* `check_mig_strategy(strategy)` accepts `none`, `single` or `mixed`.
* `disable_resource_renaming(config)` clears the `resources` lists. It also
  resets the time-slicing renames and device selections, which are not yet
  supported, and logs a message when it changes anything.

### Feature discovery settings

`gpudeviceconfig.gfd_config` does the same for feature discovery:

* `load_gfd_config(values, explicitly_set, config_file)` fills in the
  feature-discovery flag defaults and builds the config. It then drops the
  plugin-only flags.
* `config_to_json_text(config)` renders the config as indented JSON.
* `remove_output_file(path)` removes the labels file and the `gfd-tmp`
  directory beside it.

## What this package does not do

This is a library. It has no command to run. It does not talk to the
Kubernetes API and does not watch node labels. It does not switch a node's
active configuration, generate CDI specifications, or run a device plugin or
feature-discovery service. It only models, reads, merges and checks their
configuration.