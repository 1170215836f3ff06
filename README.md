# mediaconf

Building blocks for the configuration of a media streaming server that
speaks RTSP, RTMP and HLS: typed parameter values and their JSON forms,
durations and byte sizes written as text, validation of per-path settings,
a watcher that notices when a configuration file changes, a Prometheus-style
metrics renderer, and helpers for IP allow-lists and external HTTP
authentication.

Errors in configuration values are raised as `mediaconf.params.ConfError`,
a subclass of `ValueError`.

## Parameter values

`mediaconf.params` holds the enumerations used by the configuration, each
with a `parse` class method that accepts the JSON string and a `to_json`
method that gives it back:

- `Encryption` (`no`, `optional`, `strict`; `false` is read as `no`,
  `yes` and `true` as `strict`)
- `HLSVariant` (`mpegts`, `fmp4`, `lowLatency`)
- `LogLevel` (`error`, `warn`, `info`, `debug`)
- `LogDestination` (`stdout`, `file`, `syslog`)
- `Transport` (`udp`, `multicast`, `tcp`)
- `AuthMethod` (`basic`, `digest`)

```python
from mediaconf.params import Encryption, parse_protocols, dump_protocols

Encryption.parse("yes")               # Encryption.STRICT
protocols = parse_protocols("tcp,udp")
dump_protocols(protocols)             # ['tcp', 'udp']
```

The list helpers accept either a list of strings or a single
comma-separated string:

- `parse_protocols` / `dump_protocols` and `parse_log_destinations` /
  `dump_log_destinations` work with sets; the dumped lists are sorted.
- `parse_auth_methods` keeps order and duplicates; `dump_auth_methods`
  sorts.
- `parse_source_protocol` returns a `Transport`, or `None` for
  `automatic`; `dump_source_protocol` is its inverse.
- `parse_credential` accepts an empty string, a value starting with
  `sha256:`, or one made only of letters, digits and
  `! $ ( ) * + . ; < = > [ ] ^ _ - { }`.
- `parse_ips_or_cidrs` turns each entry into an `ipaddress` address or
  network (host bits are masked off); `dump_ips_or_cidrs` gives sorted
  strings.

## Durations and sizes

`mediaconf.durations` converts between text and integers:

```python
from mediaconf.durations import parse_duration, format_duration
from mediaconf.durations import parse_byte_size, format_byte_size

parse_duration("1m30s")      # 90_000_000_000 (nanoseconds)
format_duration(200_000_000) # '200ms'
parse_byte_size("50M")       # 52428800
format_byte_size(52428800)   # '50M'
```

Duration units are `ns`, `us` (or `µs`), `ms`, `s`, `m` and `h`, and may be
combined and fractional. Sizes take a unit letter `K`, `M`, `G`, `T`, `P`
or `E` (binary multiples), optionally followed by `B` or `iB`, or a bare
`B`; case does not matter.

## Path settings

`mediaconf.pathconf.PathConf` is a dataclass holding the settings of one
path: its source (`publisher`, an `rtsp(s)://`, `rtmp(s)://` or
`http(s)://` URL, `redirect` or `rpiCamera`), on-demand behaviour, camera
options, credentials, allowed IPs and external commands.

```python
from types import SimpleNamespace
from mediaconf.pathconf import PathConf, is_valid_path_name

pconf = PathConf.from_json({"source": "rtsp://localhost:8554/cam", "sourceOnDemand": True})
pconf.check_and_fill_missing(SimpleNamespace(external_authentication_url=""), "cam1")
pconf.to_json()["sourceOnDemandStartTimeout"]   # '10s'
```

- `from_json` builds the settings from a JSON-like mapping; unknown keys
  and `None` values are ignored, wrongly typed values raise `ConfError`.
- `to_json` returns the JSON form with keys in declaration order.
- `check_and_fill_missing(conf, name)` validates the settings under the
  path name `name` and fills in defaults (source `publisher`, 10 s
  timeouts, camera defaults for `rpiCamera`). `conf` is any object with an
  `external_authentication_url` attribute. A name starting with `~` is
  compiled as a regular expression into `pconf.regexp`; such paths cannot
  have a fixed source or `runOnInit`.
- `is_valid_path_name(name)` raises `ConfError` for an empty name, a
  leading or trailing slash, or characters other than letters, digits,
  `_ - / . ~`.

## Watching a file

```python
from mediaconf.watcher import ConfWatcher

with ConfWatcher("server.yml") as watcher:
    if watcher.wait(timeout=5.0):
        print("file changed")
```

The constructor raises `OSError` when the file does not exist. `wait`
returns `True` when a change was seen and `False` on timeout or after
`close`. Changes are reported at most once per second; writing the file,
recreating it after removal, and retargeting a symbolic link to it are all
detected.

## Metrics

`mediaconf.metrics.render_metrics` produces text in the Prometheus
exposition format from mappings of names or ids to `PathStats`,
`ConnStats`, `SessionStats` and `MuxerStats` records:

```python
from mediaconf.metrics import PathStats, MuxerStats, render_metrics

print(render_metrics(
    paths={"cam1": PathStats(source_ready=True, bytes_received=1024)},
    hls_muxers={"cam1": MuxerStats(bytes_sent=512)},
))
```

A section passed as `None` is left out. RTMP connections carry a state and
are given as `SessionStats`. `metric(key, value)` formats a single line.

## IP checks and external authentication

- `mediaconf.netutil.ip_equal_or_in_range(ip, entries)` tells whether an
  address (string or `ipaddress` object) equals one of the addresses or
  lies in one of the networks; IPv4-mapped IPv6 addresses are compared as
  IPv4.
- `mediaconf.netutil.external_auth(url, ip, user, password, path,
  is_publishing, query)` posts a JSON credential check to an HTTP service.
  It raises `PermissionError` on a non-2xx answer and `OSError` when the
  service cannot be reached.

## What this package does not do

It does not read a configuration file: there is no YAML loading, no
top-level configuration object holding global settings and the table of
paths, no overrides from environment variables and no decryption of
encrypted files. It has no HTTP control API for reading or editing the
configuration at run time, and no command-line program. It runs no
streaming server; the metrics renderer and the helpers above only format
and check data that a server supplies.