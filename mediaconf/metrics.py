"""Text metrics of paths, connections, sessions and HLS muxers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping, Optional


@dataclass(frozen=True)
class PathStats:
    """State of one path."""

    source_ready: bool
    bytes_received: int = 0


@dataclass(frozen=True)
class ConnStats:
    """Traffic of one connection that has no state of its own."""

    bytes_received: int = 0
    bytes_sent: int = 0


@dataclass(frozen=True)
class SessionStats:
    """Traffic and state of one session (or of a connection that carries a state)."""

    state: str
    bytes_received: int = 0
    bytes_sent: int = 0


@dataclass(frozen=True)
class MuxerStats:
    """Traffic of one HLS muxer."""

    bytes_sent: int = 0


def metric(key: str, value: int) -> str:
    """Format one metric line."""
    return f"{key} {int(value)}\n"


def _path_lines(paths: Mapping[str, PathStats]) -> Iterator[str]:
    for name, stats in paths.items():
        state = "ready" if stats.source_ready else "notReady"
        tags = f'{{name="{name}",state="{state}"}}'
        yield metric("paths" + tags, 1)
        yield metric("paths_bytes_received" + tags, stats.bytes_received)


def _conn_lines(prefix: str, conns: Mapping[str, ConnStats]) -> Iterator[str]:
    for conn_id, stats in conns.items():
        tags = f'{{id="{conn_id}"}}'
        yield metric(prefix + tags, 1)
        yield metric(prefix + "_bytes_received" + tags, stats.bytes_received)
        yield metric(prefix + "_bytes_sent" + tags, stats.bytes_sent)


def _session_lines(prefix: str, sessions: Mapping[str, SessionStats]) -> Iterator[str]:
    for session_id, stats in sessions.items():
        tags = f'{{id="{session_id}",state="{stats.state}"}}'
        yield metric(prefix + tags, 1)
        yield metric(prefix + "_bytes_received" + tags, stats.bytes_received)
        yield metric(prefix + "_bytes_sent" + tags, stats.bytes_sent)


def _muxer_lines(muxers: Mapping[str, MuxerStats]) -> Iterator[str]:
    for name, stats in muxers.items():
        tags = f'{{name="{name}"}}'
        yield metric("hls_muxers" + tags, 1)
        yield metric("hls_muxers_bytes_sent" + tags, stats.bytes_sent)


def render_metrics(
    paths: Optional[Mapping[str, PathStats]] = None,
    rtsp_conns: Optional[Mapping[str, ConnStats]] = None,
    rtsp_sessions: Optional[Mapping[str, SessionStats]] = None,
    rtsps_conns: Optional[Mapping[str, ConnStats]] = None,
    rtsps_sessions: Optional[Mapping[str, SessionStats]] = None,
    rtmp_conns: Optional[Mapping[str, SessionStats]] = None,
    hls_muxers: Optional[Mapping[str, MuxerStats]] = None,
) -> str:
    """Render the metrics page.

    A section given as None (a server that is not running, or a listing that
    failed) is left out. RTMP connections carry a state, so they are given as
    SessionStats.
    """
    sections = (
        _path_lines(paths) if paths is not None else (),
        _conn_lines("rtsp_conns", rtsp_conns) if rtsp_conns is not None else (),
        _session_lines("rtsp_sessions", rtsp_sessions) if rtsp_sessions is not None else (),
        _conn_lines("rtsps_conns", rtsps_conns) if rtsps_conns is not None else (),
        _session_lines("rtsps_sessions", rtsps_sessions) if rtsps_sessions is not None else (),
        _session_lines("rtmp_conns", rtmp_conns) if rtmp_conns is not None else (),
        _muxer_lines(hls_muxers) if hls_muxers is not None else (),
    )
    return "".join(line for section in sections for line in section)