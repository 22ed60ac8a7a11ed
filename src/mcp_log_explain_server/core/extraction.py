"""Metadata extraction from raw, unstructured log lines.

Every field is found by its own fixed regex list (first hit wins). All field
searches run on a scan buffer with the timestamp token removed so that clock
digits are never mistaken for ports, pids or status codes.
"""

from __future__ import annotations

import re

from .models import ParsedMetadata, SeverityLevel

_TIMESTAMP_PATTERNS: tuple[re.Pattern[str], ...] = (
    # ISO-8601: 2026-02-11T10:30:00.123Z / +05:30
    re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:?\d{2})?)"),
    # syslog: Feb 11 10:30:00
    re.compile(r"([A-Z][a-z]{2}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2})"),
    # common log: 11/Feb/2026:10:30:00 +0000
    re.compile(r"(\d{2}/[A-Z][a-z]{2}/\d{4}:\d{2}:\d{2}:\d{2}\s+[+-]\d{4})"),
    re.compile(r"(\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}(?:\.\d+)?)"),
    # unix epoch, seconds or milliseconds
    re.compile(r"\b(1\d{9}(?:\d{3})?)\b"),
)

LOG_LEVEL_WORDS: frozenset[str] = frozenset(
    {
        "EMERG",
        "EMERGENCY",
        "ALERT",
        "CRIT",
        "CRITICAL",
        "ERR",
        "ERROR",
        "WARN",
        "WARNING",
        "NOTICE",
        "INFO",
        "DEBUG",
        "TRACE",
        "FATAL",
        "VERBOSE",
    }
)

_LEVEL_RE = re.compile(
    r"\b(EMERG|EMERGENCY|ALERT|CRIT|CRITICAL|ERR|ERROR|WARN|WARNING|NOTICE|INFO|DEBUG|TRACE|FATAL|VERBOSE)\b",
    re.IGNORECASE,
)
_PID_RE = re.compile(r"\bpid[=:\s]+(\d+)\b|\[(\d+)\]|\bPID\s+(\d+)\b", re.IGNORECASE)
_IP_RE = re.compile(r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})\b")
_PORT_TOKEN_RE = re.compile(r"\bport[=:\s]+(\d{2,5})\b", re.IGNORECASE)
_COLON_PORT_RE = re.compile(r":(\d{2,5})\b")
_CLOCK_RE = re.compile(r"\b\d{1,2}:\d{2}(?::\d{2})?\b")

_COMMON_ERROR_CODE_RE = re.compile(
    r"\b(ECONNREFUSED|ECONNRESET|ETIMEDOUT|EPIPE|EADDRINUSE|EADDRNOTAVAIL|EAI_AGAIN"
    r"|ENOTFOUND|ENOENT|ENOSPC|EACCES|EPERM|EHOSTUNREACH|ENETUNREACH|ECONNABORTED)\b"
)
_GENERIC_ERROR_CODE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(E[A-Z0-9_]{3,})\b"),
    re.compile(r"""\bcode[=:\s]+['"]?([A-Z0-9_]+)['"]?\b""", re.IGNORECASE),
)

_HTTP_STATUS_RE = re.compile(
    r"""\bHTTP[/\s]+\d\.\d['"]*\s+(\d{3})\b"""
    r"|\bstatus[=:\s]+(\d{3})\b"
    r"|\b(\d{3})\s+(?:OK|Created|Accepted|Bad\s+Request|Unauthorized|Forbidden|Not\s+Found"
    r"|Internal\s+Server|Service\s+Unavailable|Gateway\s+Time)",
    re.IGNORECASE,
)
_HTTP_METHOD_RE = re.compile(r"\b(GET|POST|PUT|PATCH|DELETE|HEAD|OPTIONS|CONNECT|TRACE)\b")
_URL_RE = re.compile(r"""(?:https?://[^\s"']+)|(?:/[a-zA-Z0-9._~:/?#\[\]@!$&'()*+,;=-]+)""")
_USERNAME_RE = re.compile(
    r"""\buser(?:name)?[=:\s]+['"]?([a-zA-Z0-9._@-]+)['"]?\b""", re.IGNORECASE
)
_FILE_PATH_RE = re.compile(
    r"(?:/(?:[a-zA-Z0-9._-]+/)+[a-zA-Z0-9._-]+)|(?:[A-Z]:\\(?:[^\s\\]+\\)*[^\s\\]+)"
)

_SYSLOG_TIMESTAMP_RE = re.compile(r"[A-Z][a-z]{2}\s+\d{1,2}\s+\d{2}:\d{2}:\d{2}")
# "host service[pid]:" left at the head of the buffer once a syslog stamp is gone
_SYSLOG_SOURCE_RE = re.compile(r"^\s*([\w.-]+)\s+[\w./-]+?(?:\[\d+\])?:")
_SOURCE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # systemd unit
    re.compile(r"(\S+\.service)"),
    # docker compose style "web-1  | ..."
    re.compile(r"^\s*(\S+)\s+\|"),
    re.compile(r"\[([a-zA-Z0-9._-]+)\]|\(([a-zA-Z0-9._-]+)\)"),
)

_LEADING_SEPARATOR_RE = re.compile(r"^\s*[-:]\s*")

_LEVEL_SEVERITY: dict[str, SeverityLevel] = {
    "EMERG": SeverityLevel.CRITICAL,
    "EMERGENCY": SeverityLevel.CRITICAL,
    "FATAL": SeverityLevel.CRITICAL,
    "CRIT": SeverityLevel.CRITICAL,
    "CRITICAL": SeverityLevel.CRITICAL,
    "ERR": SeverityLevel.HIGH,
    "ERROR": SeverityLevel.HIGH,
    "ALERT": SeverityLevel.HIGH,
    "WARN": SeverityLevel.MEDIUM,
    "WARNING": SeverityLevel.MEDIUM,
    "NOTICE": SeverityLevel.MEDIUM,
}


def level_severity(log_level: str | None) -> SeverityLevel | None:
    """Map a log-level token to a severity.

    Returns None when no level was extracted. Levels outside the error and
    warning families (INFO, DEBUG, TRACE, VERBOSE...) map to MEDIUM.
    """
    if not log_level:
        return None
    return _LEVEL_SEVERITY.get(log_level.upper(), SeverityLevel.MEDIUM)


def _first_group(m: re.Match[str] | None) -> str | None:
    """Return the first non-empty capture group of a match."""
    if m is None:
        return None
    for g in m.groups():
        if g:
            return g
    return None


def _find_timestamp(text: str) -> str | None:
    for pattern in _TIMESTAMP_PATTERNS:
        m = pattern.search(text)
        if m:
            return m.group(1)
    return None


def _find_port(text: str, ip_address: str | None) -> str | None:
    if ip_address:
        m = re.search(rf"\b{re.escape(ip_address)}:(\d{{2,5}})\b", text)
        if m:
            return m.group(1)

    m = _PORT_TOKEN_RE.search(text)
    if m:
        return m.group(1)

    clocks = [c.span() for c in _CLOCK_RE.finditer(text)]
    for m in _COLON_PORT_RE.finditer(text):
        # ":30" and ":00" inside "10:30:00" are clock digits, not ports
        if any(start <= m.start() < end for start, end in clocks):
            continue
        return m.group(1)
    return None


def _find_error_code(text: str) -> str | None:
    m = _COMMON_ERROR_CODE_RE.search(text)
    if m:
        return m.group(1)

    for pattern in _GENERIC_ERROR_CODE_PATTERNS:
        for m in pattern.finditer(text):
            candidate = m.group(1).upper()
            if candidate not in LOG_LEVEL_WORDS:
                return candidate
    return None


def _find_source(text: str, *, syslog_head: bool) -> str | None:
    if syslog_head:
        m = _SYSLOG_SOURCE_RE.search(text)
        # "Feb 11 10:30:00 ERROR db: ..." has no host, only a level
        if m and m.group(1).upper() not in LOG_LEVEL_WORDS:
            return m.group(1)
    for pattern in _SOURCE_PATTERNS:
        source = _first_group(pattern.search(text))
        if source:
            return source
    return None


def _message_body(trimmed: str, timestamp: str | None) -> str:
    body = trimmed.replace(timestamp, "", 1) if timestamp else trimmed
    return _LEADING_SEPARATOR_RE.sub("", body, count=1).strip()


def parse_log_line(raw: str) -> ParsedMetadata:
    """Extract structured metadata from one raw log line.

    Never raises: any string (including the empty string) yields a
    ``ParsedMetadata`` whose absent fields are None.
    """
    trimmed = raw.strip()
    timestamp = _find_timestamp(trimmed)
    scan = trimmed.replace(timestamp, " ", 1) if timestamp else trimmed

    syslog_head = (
        timestamp is not None
        and trimmed.startswith(timestamp)
        and _SYSLOG_TIMESTAMP_RE.fullmatch(timestamp) is not None
    )

    level_match = _LEVEL_RE.search(scan)
    ip_address = _first_group(_IP_RE.search(scan))
    url_match = _URL_RE.search(scan)
    path_match = _FILE_PATH_RE.search(scan)

    return ParsedMetadata(
        message_body=_message_body(trimmed, timestamp),
        timestamp=timestamp,
        log_level=level_match.group(1).upper() if level_match else None,
        source=_find_source(scan, syslog_head=syslog_head),
        pid=_first_group(_PID_RE.search(scan)),
        error_code=_find_error_code(scan),
        ip_address=ip_address,
        port=_find_port(scan, ip_address),
        username=_first_group(_USERNAME_RE.search(scan)),
        file_path=path_match.group(0) if path_match else None,
        http_status=_first_group(_HTTP_STATUS_RE.search(scan)),
        http_method=_first_group(_HTTP_METHOD_RE.search(scan)),
        url=url_match.group(0) if url_match else None,
    )
