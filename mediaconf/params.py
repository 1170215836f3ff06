"""Enumerated and list-valued configuration parameters and their JSON forms."""

from __future__ import annotations

import ipaddress
import re
from enum import Enum
from typing import Iterable, Union

IPEntry = Union[
    ipaddress.IPv4Address,
    ipaddress.IPv6Address,
    ipaddress.IPv4Network,
    ipaddress.IPv6Network,
]


class ConfError(ValueError):
    """Raised when a configuration value is invalid."""


def _require_str(value: object) -> str:
    if not isinstance(value, str):
        raise ConfError(f"expected a string, got {value!r}")
    return value


def _string_list(values: object) -> list[str]:
    """Accept a comma-separated string, a list of strings or None."""
    if values is None:
        return []
    if isinstance(values, str):
        return values.split(",")
    if not isinstance(values, (list, tuple)):
        raise ConfError(f"expected a list of strings, got {values!r}")
    return [_require_str(v) for v in values]


class AuthMethod(Enum):
    """RTSP authentication method."""

    BASIC = "basic"
    DIGEST = "digest"

    @classmethod
    def parse(cls, value: object) -> "AuthMethod":
        text = _require_str(value)
        try:
            return cls(text)
        except ValueError:
            raise ConfError(f"invalid authentication method: {text}") from None

    def to_json(self) -> str:
        return self.value


class Encryption(Enum):
    """Encryption policy of a server."""

    NO = "no"
    OPTIONAL = "optional"
    STRICT = "strict"

    @classmethod
    def parse(cls, value: object) -> "Encryption":
        text = _require_str(value)
        aliases = {"false": "no", "yes": "strict", "true": "strict"}
        try:
            return cls(aliases.get(text, text))
        except ValueError:
            raise ConfError(f"invalid encryption value: '{text}'") from None

    def to_json(self) -> str:
        return self.value


class HLSVariant(Enum):
    """Variant of the HLS muxer."""

    MPEGTS = "mpegts"
    FMP4 = "fmp4"
    LOW_LATENCY = "lowLatency"

    @classmethod
    def parse(cls, value: object) -> "HLSVariant":
        text = _require_str(value)
        try:
            return cls(text)
        except ValueError:
            raise ConfError(f"invalid hlsVariant value: '{text}'") from None

    def to_json(self) -> str:
        return self.value


class LogLevel(Enum):
    """Verbosity of the log."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    @classmethod
    def parse(cls, value: object) -> "LogLevel":
        text = _require_str(value)
        try:
            return cls(text)
        except ValueError:
            raise ConfError(f"invalid log level: {text}") from None

    def to_json(self) -> str:
        return self.value


class LogDestination(Enum):
    """Where log entries are written."""

    STDOUT = "stdout"
    FILE = "file"
    SYSLOG = "syslog"

    @classmethod
    def parse(cls, value: object) -> "LogDestination":
        text = _require_str(value)
        try:
            return cls(text)
        except ValueError:
            raise ConfError(f"invalid log destination: {text}") from None

    def to_json(self) -> str:
        return self.value


class Transport(Enum):
    """RTSP transport protocol."""

    UDP = "udp"
    MULTICAST = "multicast"
    TCP = "tcp"

    @classmethod
    def parse(cls, value: object) -> "Transport":
        text = _require_str(value)
        try:
            return cls(text)
        except ValueError:
            raise ConfError(f"invalid protocol: {text}") from None

    def to_json(self) -> str:
        return self.value


def parse_auth_methods(values: object) -> list[AuthMethod]:
    """Parse the authMethods parameter, keeping order and duplicates."""
    return [AuthMethod.parse(v) for v in _string_list(values)]


def dump_auth_methods(methods: Iterable[AuthMethod]) -> list[str]:
    return sorted(m.to_json() for m in methods)


def parse_log_destinations(values: object) -> set[LogDestination]:
    return {LogDestination.parse(v) for v in _string_list(values)}


def dump_log_destinations(destinations: Iterable[LogDestination]) -> list[str]:
    return sorted(d.to_json() for d in set(destinations))


def parse_protocols(values: object) -> set[Transport]:
    return {Transport.parse(v) for v in _string_list(values)}


def dump_protocols(protocols: Iterable[Transport]) -> list[str]:
    return sorted(p.to_json() for p in set(protocols))


def parse_source_protocol(value: object) -> Transport | None:
    """Parse sourceProtocol; "automatic" yields None."""
    text = _require_str(value)
    if text == "automatic":
        return None
    try:
        return Transport(text)
    except ValueError:
        raise ConfError(f"invalid protocol '{text}'") from None


def dump_source_protocol(transport: Transport | None) -> str:
    return "automatic" if transport is None else transport.to_json()


_CREDENTIAL_RE = re.compile(r"[a-zA-Z0-9!$()*+.;<=>\[\]^_\-{}]+")
_CREDENTIAL_SUPPORTED = "A-Z,0-9,!,$,(,),*,+,.,;,<,=,>,[,],^,_,-,{,}"


def parse_credential(value: object) -> str:
    """Validate a username or password parameter."""
    text = _require_str(value)
    if text and not text.startswith("sha256:") and not _CREDENTIAL_RE.fullmatch(text):
        raise ConfError(
            f"contains unsupported characters (supported are {_CREDENTIAL_SUPPORTED})"
        )
    return text


def _parse_ip_entry(text: str) -> IPEntry:
    error = ConfError(f"unable to parse IP/CIDR '{text}'")
    if "%" in text:
        raise error
    if "/" in text:
        prefix = text.partition("/")[2]
        if not (prefix.isascii() and prefix.isdigit()):
            raise error
        try:
            return ipaddress.ip_network(text, strict=False)
        except ValueError:
            raise error from None
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        raise error from None


def parse_ips_or_cidrs(values: object) -> list[IPEntry]:
    """Parse a list of IP addresses or CIDR networks."""
    return [_parse_ip_entry(v) for v in _string_list(values)]


def dump_ips_or_cidrs(entries: Iterable[IPEntry]) -> list[str]:
    return sorted(str(e) for e in entries)