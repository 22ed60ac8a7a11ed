from __future__ import annotations

import pytest

from mcp_log_explain_server.core.extraction import level_severity, parse_log_line
from mcp_log_explain_server.core.models import SeverityLevel


def test_parse_iso_line_with_ip_and_port() -> None:
    meta = parse_log_line(
        "2026-02-11T10:30:00Z ERROR Connection refused to database at 10.0.1.5:5432"
    )

    assert meta.timestamp == "2026-02-11T10:30:00Z"
    assert meta.log_level == "ERROR"
    assert meta.ip_address == "10.0.1.5"
    assert meta.port == "5432"
    assert meta.error_code is None
    assert meta.source is None
    assert meta.message_body == "ERROR Connection refused to database at 10.0.1.5:5432"


def test_parse_common_error_code() -> None:
    meta = parse_log_line("ERROR: ECONNREFUSED 127.0.0.1:5432")

    assert meta.log_level == "ERROR"
    assert meta.error_code == "ECONNREFUSED"
    assert meta.ip_address == "127.0.0.1"
    assert meta.port == "5432"


def test_parse_syslog_line_takes_host_as_source() -> None:
    meta = parse_log_line(
        "Feb 11 10:30:00 web01 sshd[1234]: Failed password for root from 10.0.0.9 port 22 ssh2"
    )

    assert meta.timestamp == "Feb 11 10:30:00"
    assert meta.source == "web01"
    assert meta.pid == "1234"
    assert meta.ip_address == "10.0.0.9"
    assert meta.port == "22"
    assert meta.log_level is None


def test_parse_access_log_line() -> None:
    meta = parse_log_line(
        '127.0.0.1 - - [11/Feb/2026:10:30:00 +0000] "GET /api/v1/users HTTP/1.1" 503 512'
    )

    assert meta.timestamp == "11/Feb/2026:10:30:00 +0000"
    assert meta.http_method == "GET"
    assert meta.url == "/api/v1/users"
    assert meta.http_status == "503"
    assert meta.port is None


def test_parse_username() -> None:
    meta = parse_log_line('FATAL: password authentication failed for user "admin"')

    assert meta.log_level == "FATAL"
    assert meta.username == "admin"


def test_parse_epoch_timestamp() -> None:
    meta = parse_log_line("1700000000 worker exited")

    assert meta.timestamp == "1700000000"
    assert meta.message_body == "worker exited"


def test_clock_digits_are_not_ports() -> None:
    meta = parse_log_line("job finished at 12:45:10 on node-3")

    assert meta.port is None


def test_parse_empty_line_never_raises() -> None:
    meta = parse_log_line("")

    assert meta.message_body == ""
    assert meta.timestamp is None
    assert meta.log_level is None
    assert meta.ip_address is None
    assert meta.url is None


@pytest.mark.parametrize(
    ("level", "expected"),
    [
        ("FATAL", SeverityLevel.CRITICAL),
        ("emergency", SeverityLevel.CRITICAL),
        ("ERROR", SeverityLevel.HIGH),
        ("WARN", SeverityLevel.MEDIUM),
        ("INFO", SeverityLevel.MEDIUM),
        ("DEBUG", SeverityLevel.MEDIUM),
        (None, None),
    ],
)
def test_level_severity(level: str | None, expected: SeverityLevel | None) -> None:
    assert level_severity(level) is expected


@pytest.mark.parametrize(
    "line",
    [
        "Feb 11 10:30:00 ERROR db: connection refused",
        "Jan  5 09:01:02 INFO kernel: something",
    ],
)
def test_level_word_after_syslog_stamp_is_not_a_host(line: str) -> None:
    meta = parse_log_line(line)

    assert meta.source is None
    assert meta.log_level in {"ERROR", "INFO"}


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("2026-02-11T10:30:00Z ERROR nginx.service: Failed with result 'exit-code'", "nginx.service"),
        ("web-1  | ERROR connection reset", "web-1"),
        ("2026-02-11 10:30:00 [worker-3] job failed", "worker-3"),
        ("payment (billing-api) request failed", "billing-api"),
    ],
)
def test_source_fallbacks(line: str, expected: str) -> None:
    assert parse_log_line(line).source == expected


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("ENOENT: no such file or directory, open '/etc/app/config.yml'", "/etc/app/config.yml"),
        ("Failed to load C:\\Users\\app\\cfg.ini", "C:\\Users\\app\\cfg.ini"),
    ],
)
def test_file_paths(line: str, expected: str) -> None:
    assert parse_log_line(line).file_path == expected


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("ERROR EBADCSRFTOKEN invalid csrf token", "EBADCSRFTOKEN"),
        ("request failed code=abc_12", "ABC_12"),
        ("ERROR something odd", None),
        ("WARNING disk nearly full", None),
    ],
)
def test_generic_error_codes(line: str, expected: str | None) -> None:
    assert parse_log_line(line).error_code == expected
