"""Configuration of a single path."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Optional
from urllib.parse import SplitResult, unquote, urlsplit

from mediaconf.durations import SECOND, format_duration, parse_duration
from mediaconf.params import (
    ConfError,
    IPEntry,
    Transport,
    dump_ips_or_cidrs,
    dump_source_protocol,
    parse_credential,
    parse_ips_or_cidrs,
    parse_source_protocol,
)

_PATH_NAME_RE = re.compile(r"[0-9a-zA-Z_\-/.~]+")

_JSON_PUBLISH_PHRASE = "publishPass"
_JSON_READ_PHRASE = "readPass"


def is_valid_path_name(name: str) -> None:
    """Raise ConfError if ``name`` is not a valid path name."""
    if name == "":
        raise ConfError("cannot be empty")
    if name[0] == "/":
        raise ConfError("can't begin with a slash")
    if name[-1] == "/":
        raise ConfError("can't end with a slash")
    if not _PATH_NAME_RE.fullmatch(name):
        raise ConfError(
            "can contain only alphanumeric characters, underscore, dot, tilde, minus or slash"
        )


def _param(
    json_name: str,
    default: Any,
    parse: Optional[Callable[[Any], Any]] = None,
    dump: Optional[Callable[[Any], Any]] = None,
) -> Any:
    metadata: dict[str, Any] = {"json": json_name}
    if parse is not None:
        metadata["parse"] = parse
    if dump is not None:
        metadata["dump"] = dump
    if isinstance(default, list):
        return field(default_factory=list, metadata=metadata)
    return field(default=default, metadata=metadata)


def _duration(json_name: str) -> Any:
    return _param(json_name, 0, parse_duration, format_duration)


def _credential(json_name: str) -> Any:
    return _param(json_name, "", parse_credential)


def _ips(json_name: str) -> Any:
    return _param(json_name, [], parse_ips_or_cidrs, dump_ips_or_cidrs)


def _decode_plain(json_name: str, value: Any, kind: type) -> Any:
    error = ConfError(f"cannot unmarshal {value!r} into parameter '{json_name}'")
    if kind is bool:
        if not isinstance(value, bool):
            raise error
        return value
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise error
        return value
    if kind is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise error
        return float(value)
    if not isinstance(value, str):
        raise error
    return value


def _split_url(text: str) -> Optional[SplitResult]:
    try:
        parts = urlsplit(text)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None
    return parts


def _is_rtsp_url(text: str) -> bool:
    parts = _split_url(text)
    return parts is not None and parts.scheme in ("rtsp", "rtsps") and bool(parts.netloc)


def _check_user_and_pass(parts: SplitResult) -> None:
    user = unquote(parts.username or "")
    given = unquote(parts.password or "")
    if bool(user) != bool(given):
        raise ConfError("username and password must be both provided")


@dataclass
class PathConf:
    """Settings of one path (or of a family of paths given by a regular expression)."""

    regexp: Optional[re.Pattern] = field(
        default=None, compare=False, repr=False, metadata={"env": False}
    )

    # source
    source: str = _param("source", "")
    source_protocol: Optional[Transport] = _param(
        "sourceProtocol", None, parse_source_protocol, dump_source_protocol
    )
    source_any_port_enable: bool = _param("sourceAnyPortEnable", False)
    source_fingerprint: str = _param("sourceFingerprint", "")
    source_on_demand: bool = _param("sourceOnDemand", False)
    source_on_demand_start_timeout: int = _duration("sourceOnDemandStartTimeout")
    source_on_demand_close_after: int = _duration("sourceOnDemandCloseAfter")
    source_redirect: str = _param("sourceRedirect", "")
    disable_publisher_override: bool = _param("disablePublisherOverride", False)
    fallback: str = _param("fallback", "")
    rpi_camera_cam_id: int = _param("rpiCameraCamID", 0)
    rpi_camera_width: int = _param("rpiCameraWidth", 0)
    rpi_camera_height: int = _param("rpiCameraHeight", 0)
    rpi_camera_h_flip: bool = _param("rpiCameraHFlip", False)
    rpi_camera_v_flip: bool = _param("rpiCameraVFlip", False)
    rpi_camera_brightness: float = _param("rpiCameraBrightness", 0.0)
    rpi_camera_contrast: float = _param("rpiCameraContrast", 0.0)
    rpi_camera_saturation: float = _param("rpiCameraSaturation", 0.0)
    rpi_camera_sharpness: float = _param("rpiCameraSharpness", 0.0)
    rpi_camera_exposure: str = _param("rpiCameraExposure", "")
    rpi_camera_awb: str = _param("rpiCameraAWB", "")
    rpi_camera_denoise: str = _param("rpiCameraDenoise", "")
    rpi_camera_shutter: int = _param("rpiCameraShutter", 0)
    rpi_camera_metering: str = _param("rpiCameraMetering", "")
    rpi_camera_gain: float = _param("rpiCameraGain", 0.0)
    rpi_camera_ev: float = _param("rpiCameraEV", 0.0)
    rpi_camera_roi: str = _param("rpiCameraROI", "")
    rpi_camera_tuning_file: str = _param("rpiCameraTuningFile", "")
    rpi_camera_mode: str = _param("rpiCameraMode", "")
    rpi_camera_fps: int = _param("rpiCameraFPS", 0)
    rpi_camera_idr_period: int = _param("rpiCameraIDRPeriod", 0)
    rpi_camera_bitrate: int = _param("rpiCameraBitrate", 0)
    rpi_camera_profile: str = _param("rpiCameraProfile", "")
    rpi_camera_level: str = _param("rpiCameraLevel", "")

    # authentication
    publish_user: str = _credential("publishUser")
    publish_pass: str = _credential(_JSON_PUBLISH_PHRASE)
    publish_ips: list[IPEntry] = _ips("publishIPs")
    read_user: str = _credential("readUser")
    read_pass: str = _credential(_JSON_READ_PHRASE)
    read_ips: list[IPEntry] = _ips("readIPs")

    # external commands
    run_on_init: str = _param("runOnInit", "")
    run_on_init_restart: bool = _param("runOnInitRestart", False)
    run_on_demand: str = _param("runOnDemand", "")
    run_on_demand_restart: bool = _param("runOnDemandRestart", False)
    run_on_demand_start_timeout: int = _duration("runOnDemandStartTimeout")
    run_on_demand_close_after: int = _duration("runOnDemandCloseAfter")
    run_on_ready: str = _param("runOnReady", "")
    run_on_ready_restart: bool = _param("runOnReadyRestart", False)
    run_on_read: str = _param("runOnRead", "")
    run_on_read_restart: bool = _param("runOnReadRestart", False)

    @classmethod
    def from_json(cls, data: Any) -> "PathConf":
        """Build a PathConf from a JSON-like mapping; unknown keys are ignored."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfError("not a map")

        by_json = {f.metadata["json"]: f for f in fields(cls) if "json" in f.metadata}
        values: dict[str, Any] = {}
        for key, value in data.items():
            f = by_json.get(key)
            if f is None or value is None:
                continue
            parse = f.metadata.get("parse")
            if parse is not None:
                values[f.name] = parse(value)
            else:
                values[f.name] = _decode_plain(key, value, type(f.default))
        return cls(**values)

    def to_json(self) -> dict[str, Any]:
        """Return the JSON form, with keys in declaration order."""
        out: dict[str, Any] = {}
        for f in fields(self):
            if "json" not in f.metadata:
                continue
            value = getattr(self, f.name)
            dump = f.metadata.get("dump")
            out[f.metadata["json"]] = dump(value) if dump is not None else value
        return out

    def check_and_fill_missing(self, conf: Any, name: str) -> None:
        """Validate this path against the global ``conf`` and fill in defaults."""
        if name == "":
            raise ConfError("path name can not be empty")

        if name[0] != "~":
            try:
                is_valid_path_name(name)
            except ConfError as exc:
                raise ConfError(f"invalid path name: {exc} ({name})") from exc
        else:
            try:
                self.regexp = re.compile(name[1:])
            except re.error:
                raise ConfError(f"invalid regular expression: {name[1:]}") from None

        if self.source == "":
            self.source = "publisher"

        self._check_source()

        if self.source_on_demand and self.source == "publisher":
            raise ConfError("'sourceOnDemand' is useless when source is 'publisher'")

        if self.source_on_demand_start_timeout == 0:
            self.source_on_demand_start_timeout = 10 * SECOND
        if self.source_on_demand_close_after == 0:
            self.source_on_demand_close_after = 10 * SECOND

        if self.fallback:
            if self.fallback.startswith("/"):
                try:
                    is_valid_path_name(self.fallback[1:])
                except ConfError as exc:
                    raise ConfError(f"'{self.fallback}': {exc}") from exc
            elif not _is_rtsp_url(self.fallback):
                raise ConfError(f"'{self.fallback}' is not a valid RTSP URL")

        self._check_auth(conf.external_authentication_url)

        if self.run_on_init and self.regexp is not None:
            raise ConfError(
                "a path with a regular expression does not support option 'runOnInit'; "
                "use another path"
            )

        if self.run_on_demand and self.source != "publisher":
            raise ConfError("'runOnDemand' can be used only when source is 'publisher'")

        if self.run_on_demand_start_timeout == 0:
            self.run_on_demand_start_timeout = 10 * SECOND
        if self.run_on_demand_close_after == 0:
            self.run_on_demand_close_after = 10 * SECOND

    def _check_source(self) -> None:
        source = self.source

        if source == "publisher":
            return

        if source.startswith(("rtsp://", "rtsps://")):
            if self.regexp is not None:
                raise ConfError(
                    "a path with a regular expression (or path 'all') cannot have "
                    "a RTSP source. use another path"
                )
            if not _is_rtsp_url(source):
                raise ConfError(f"'{source}' is not a valid RTSP URL")
            return

        if source.startswith(("rtmp://", "rtmps://")):
            if self.regexp is not None:
                raise ConfError(
                    "a path with a regular expression (or path 'all') cannot have "
                    "a RTMP source. use another path"
                )
            parts = _split_url(source)
            if parts is None:
                raise ConfError(f"'{source}' is not a valid RTMP URL")
            _check_user_and_pass(parts)
            return

        if source.startswith(("http://", "https://")):
            if self.regexp is not None:
                raise ConfError(
                    "a path with a regular expression (or path 'all') cannot have "
                    "a HLS source. use another path"
                )
            parts = _split_url(source)
            if parts is None or parts.scheme not in ("http", "https"):
                raise ConfError(f"'{source}' is not a valid HLS URL")
            _check_user_and_pass(parts)
            return

        if source == "redirect":
            if self.source_redirect == "":
                raise ConfError("source redirect must be filled")
            if not _is_rtsp_url(self.source_redirect):
                raise ConfError(f"'{self.source_redirect}' is not a valid RTSP URL")
            return

        if source == "rpiCamera":
            if self.regexp is not None:
                raise ConfError(
                    "a path with a regular expression (or path 'all') cannot have "
                    "'rpiCamera' as source. use another path"
                )
            self._fill_rpi_camera_defaults()
            return

        raise ConfError(f"invalid source: '{source}'")

    def _fill_rpi_camera_defaults(self) -> None:
        if self.rpi_camera_width == 0:
            self.rpi_camera_width = 1920
        if self.rpi_camera_height == 0:
            self.rpi_camera_height = 1080
        if self.rpi_camera_contrast == 0:
            self.rpi_camera_contrast = 1.0
        if self.rpi_camera_saturation == 0:
            self.rpi_camera_saturation = 1.0
        if self.rpi_camera_sharpness == 0:
            self.rpi_camera_sharpness = 1.0
        if self.rpi_camera_fps == 0:
            self.rpi_camera_fps = 30
        if self.rpi_camera_idr_period == 0:
            self.rpi_camera_idr_period = 60
        if self.rpi_camera_bitrate == 0:
            self.rpi_camera_bitrate = 1000000
        if self.rpi_camera_profile == "":
            self.rpi_camera_profile = "main"
        if self.rpi_camera_level == "":
            self.rpi_camera_level = "4.1"

    def _check_auth(self, external_auth_url: str) -> None:
        if bool(self.publish_user) != bool(self.publish_pass):
            raise ConfError("read username and password must be both filled")

        if self.publish_user and self.source != "publisher":
            raise ConfError(
                "'publishUser' is useless when source is not 'publisher', since "
                "the stream is not provided by a publisher, but by a fixed source"
            )

        if self.publish_user and external_auth_url:
            raise ConfError("'publishUser' can't be used with 'externalAuthenticationURL'")

        if self.publish_ips and self.source != "publisher":
            raise ConfError(
                "'publishIPs' is useless when source is not 'publisher', since "
                "the stream is not provided by a publisher, but by a fixed source"
            )

        if self.publish_ips and external_auth_url:
            raise ConfError("'publishIPs' can't be used with 'externalAuthenticationURL'")

        if bool(self.read_user) != bool(self.read_pass):
            raise ConfError("read username and password must be both filled")

        if self.read_user and external_auth_url:
            raise ConfError("'readUser' can't be used with 'externalAuthenticationURL'")

        if self.read_ips and external_auth_url:
            raise ConfError("'readIPs' can't be used with 'externalAuthenticationURL'")