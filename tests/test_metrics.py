import re

from mediaconf.metrics import (
    ConnStats,
    MuxerStats,
    PathStats,
    SessionStats,
    metric,
    render_metrics,
)


def test_metric_line():
    assert metric("paths", 1) == "paths 1\n"


def test_empty_when_nothing_given():
    assert render_metrics() == ""


def test_path_states():
    out = render_metrics(
        paths={"cam": PathStats(True, 0), "other": PathStats(False, 7)}
    )
    assert out.splitlines() == [
        'paths{name="cam",state="ready"} 1',
        'paths_bytes_received{name="cam",state="ready"} 0',
        'paths{name="other",state="notReady"} 1',
        'paths_bytes_received{name="other",state="notReady"} 7',
    ]


def test_full_page_matches_source_layout():
    out = render_metrics(
        paths={
            "rtsp_path": PathStats(True),
            "rtsps_path": PathStats(True),
            "rtmp_path": PathStats(True),
        },
        rtsp_conns={"c1": ConnStats(10, 20)},
        rtsp_sessions={"s1": SessionStats("publish", 0, 5)},
        rtsps_conns={"c2": ConnStats(11, 21)},
        rtsps_sessions={"s2": SessionStats("publish", 0, 6)},
        rtmp_conns={"r1": SessionStats("publish", 30, 40)},
        hls_muxers={"rtsp_path": MuxerStats(99)},
    )
    pattern = (
        r'^paths\{name=".*?",state="ready"\} 1' + "\n"
        r'paths_bytes_received\{name=".*?",state="ready"\} 0' + "\n"
        r'paths\{name=".*?",state="ready"\} 1' + "\n"
        r'paths_bytes_received\{name=".*?",state="ready"\} 0' + "\n"
        r'paths\{name=".*?",state="ready"\} 1' + "\n"
        r'paths_bytes_received\{name=".*?",state="ready"\} 0' + "\n"
        r'rtsp_conns\{id=".*?"\} 1' + "\n"
        r'rtsp_conns_bytes_received\{id=".*?"\} [0-9]+' + "\n"
        r'rtsp_conns_bytes_sent\{id=".*?"\} [0-9]+' + "\n"
        r'rtsp_sessions\{id=".*?",state="publish"\} 1' + "\n"
        r'rtsp_sessions_bytes_received\{id=".*?",state="publish"\} 0' + "\n"
        r'rtsp_sessions_bytes_sent\{id=".*?",state="publish"\} [0-9]+' + "\n"
        r'rtsps_conns\{id=".*?"\} 1' + "\n"
        r'rtsps_conns_bytes_received\{id=".*?"\} [0-9]+' + "\n"
        r'rtsps_conns_bytes_sent\{id=".*?"\} [0-9]+' + "\n"
        r'rtsps_sessions\{id=".*?",state="publish"\} 1' + "\n"
        r'rtsps_sessions_bytes_received\{id=".*?",state="publish"\} 0' + "\n"
        r'rtsps_sessions_bytes_sent\{id=".*?",state="publish"\} [0-9]+' + "\n"
        r'rtmp_conns\{id=".*?",state="publish"\} 1' + "\n"
        r'rtmp_conns_bytes_received\{id=".*?",state="publish"\} [0-9]+' + "\n"
        r'rtmp_conns_bytes_sent\{id=".*?",state="publish"\} [0-9]+' + "\n"
        r'hls_muxers\{name="rtsp_path"\} 1' + "\n"
        r'hls_muxers_bytes_sent\{name="rtsp_path"\} [0-9]+' + "\n" + "$"
    )
    assert bool(re.match(pattern, out)) is True
    assert len(out.splitlines()) == 23
    assert out.endswith('hls_muxers_bytes_sent{name="rtsp_path"} 99\n')
    assert 'rtsp_conns_bytes_sent{id="c1"} 20\n' in out
    assert 'rtsps_sessions_bytes_sent{id="s2",state="publish"} 6\n' in out


def test_missing_sections_are_skipped():
    out = render_metrics(rtsp_conns=None, hls_muxers={"m": MuxerStats(3)})
    assert "rtsp_conns" not in out
    assert out.count("\n") == 2
    assert out.startswith('hls_muxers{name="m"} 1\n')


def test_values_come_from_stats():
    out = render_metrics(rtmp_conns={"x": SessionStats("read", 12, 34)})
    assert 'rtmp_conns_bytes_received{id="x",state="read"} 12\n' in out
    assert 'rtmp_conns_bytes_sent{id="x",state="read"} 34\n' in out


def test_every_line_ends_with_integer():
    out = render_metrics(
        paths={"a": PathStats(False, 3)},
        rtsp_sessions={"s": SessionStats("publish", 1, 2)},
    )
    lines = out.splitlines()
    assert len(lines) == 5
    assert all(re.fullmatch(r"\S+ [0-9]+", line) for line in lines)