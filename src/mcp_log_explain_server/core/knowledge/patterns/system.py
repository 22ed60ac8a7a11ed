"""Host resource rules: memory, disk, CPU, process crashes, missing files."""

from __future__ import annotations

import re

from ...models import (
    ExplanationTemplate,
    LogCategory,
    PatternRule,
    SeverityLevel,
    SeverityModifier,
)

_I = re.IGNORECASE

SYSTEM_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="SYS_OOM",
        name="Out of Memory (OOM)",
        category=LogCategory.MEMORY,
        matchers=(
            re.compile(r"out\s+of\s+memory", _I),
            re.compile(r"OOM\s*(?:killer|kill)", _I),
            re.compile(r"cannot\s+allocate\s+memory", _I),
            re.compile(r"ENOMEM", _I),
            re.compile(r"heap\s+out\s+of\s+memory", _I),
            re.compile(r"JavaScript\s+heap\s+out\s+of\s+memory", _I),
            re.compile(r"java\.lang\.OutOfMemoryError", _I),
            re.compile(r"MemoryError", _I),
            re.compile(r"fatal\s+error.*allocation\s+failed", _I),
        ),
        keywords=("out of memory", "OOM", "ENOMEM", "heap", "MemoryError"),
        error_codes=("ENOMEM",),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "The system or application ran out of available memory. The OS may have "
                "terminated the process (OOM killer) or the application crashed due to heap "
                "exhaustion."
            ),
            root_cause=(
                "Memory consumption exceeded the available physical or allocated heap memory."
            ),
            possible_causes=(
                "Memory leak in the application (objects not being garbage collected)",
                "Processing a dataset too large to fit in memory",
                "Insufficient server memory for the workload",
                "Too many concurrent processes/requests consuming memory",
                "Container memory limit set too low",
                "Java/Node.js heap size not configured for the workload",
            ),
            recommended_fixes=(
                "Profile memory usage to identify leaks (e.g., node --inspect, VisualVM)",
                "Increase available memory or container memory limits",
                "For Node.js: increase heap with --max-old-space-size=4096",
                "For Java: increase heap with -Xmx and -Xms JVM flags",
                "Implement pagination or streaming for large data processing",
                "Review and fix memory leaks: unclosed connections, growing caches, "
                "event listener accumulation",
                "Set up memory usage alerts before OOM threshold is reached",
            ),
        ),
    ),
    PatternRule(
        id="SYS_DISK_FULL",
        name="Disk Space Full",
        category=LogCategory.DISK,
        matchers=(
            re.compile(r"no\s+space\s+left\s+on\s+device", _I),
            re.compile(r"disk\s+(?:full|space.*(?:low|critical|exhausted))", _I),
            re.compile(r"ENOSPC", _I),
            re.compile(r"filesystem.*(?:full|100%)", _I),
            re.compile(r"write.*failed.*no\s+space", _I),
        ),
        keywords=("no space left", "disk full", "ENOSPC", "filesystem full"),
        error_codes=("ENOSPC",),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "The disk or filesystem has run out of available storage space. Write "
                "operations will fail until space is freed."
            ),
            root_cause=(
                "All available disk space on the target filesystem/partition has been consumed."
            ),
            possible_causes=(
                "Log files have grown excessively large without rotation",
                "Temporary files accumulating without cleanup",
                "Database data files consuming all available disk space",
                "Application generating excessive output or cache files",
                "Docker images/volumes consuming disk space",
                "Large file uploads or backups exhausting storage",
            ),
            recommended_fixes=(
                "Check disk usage: df -h (Linux) / Get-PSDrive (Windows)",
                "Find large files: du -sh /* --max-depth=2 or ncdu",
                "Implement log rotation using logrotate or similar tools",
                "Clean up old logs, temp files, and unused Docker images",
                "Expand the disk/volume if possible",
                "Set up disk usage monitoring and alerts at 80% threshold",
                "Move large data to a dedicated storage volume",
            ),
        ),
    ),
    PatternRule(
        id="SYS_CPU_HIGH",
        name="High CPU Utilization",
        category=LogCategory.CPU,
        matchers=(
            re.compile(r"cpu\s+(?:usage|utilization).*(?:high|100|9[0-9])", _I),
            re.compile(r"load\s+average.*(?:high|critical)", _I),
            re.compile(r"cpu.*(?:spike|overload|throttl)", _I),
            re.compile(r"process.*consuming.*cpu", _I),
        ),
        keywords=("CPU high", "CPU usage", "load average", "CPU spike", "CPU throttl"),
        severity=SeverityLevel.HIGH,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"100%|sustained|prolonged", _I),
                severity=SeverityLevel.CRITICAL,
                reason="Sustained 100% CPU will degrade all services on the host",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "CPU utilization has reached a very high level, potentially causing slow "
                "response times, timeouts, and degraded performance for all processes on the "
                "system."
            ),
            root_cause="One or more processes are consuming excessive CPU resources.",
            possible_causes=(
                "Infinite loop or CPU-intensive computation in application code",
                "Unoptimized database queries causing excessive server-side processing",
                "Sudden traffic spike overwhelming the application",
                "Background processes (backups, cron jobs) competing for CPU",
                "Insufficient CPU capacity for the current workload",
                "Cryptomining malware consuming CPU resources",
            ),
            recommended_fixes=(
                "Identify the high-CPU process: top / htop / Task Manager",
                "Profile the application to find CPU-intensive code paths",
                "Optimize hot code paths and reduce computational complexity",
                "Scale horizontally (add more instances) or vertically (add more CPU)",
                "Schedule CPU-intensive background tasks during off-peak hours",
                "Implement request throttling to prevent traffic spikes from overloading",
                "Check for and remove any unauthorized processes (malware)",
            ),
        ),
    ),
    PatternRule(
        id="SYS_PROCESS_CRASH",
        name="Process Crash / Segmentation Fault",
        category=LogCategory.PROCESS,
        matchers=(
            re.compile(r"segmentation\s+fault", _I),
            re.compile(r"segfault", _I),
            re.compile(r"SIGSEGV", _I),
            re.compile(r"SIGABRT", _I),
            re.compile(r"core\s+dumped", _I),
            re.compile(r"process.*(?:crash|died|terminated|killed)", _I),
            re.compile(r"unhandled\s+(?:exception|error|rejection)", _I),
            re.compile(r"fatal\s+error", _I),
        ),
        keywords=(
            "segfault",
            "SIGSEGV",
            "core dump",
            "crash",
            "fatal error",
            "unhandled exception",
        ),
        error_codes=("SIGSEGV", "SIGABRT", "SIGKILL"),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "A process has crashed unexpectedly, potentially causing a complete service "
                "outage. A core dump may have been generated for debugging."
            ),
            root_cause=(
                "The process encountered a fatal error (memory violation, unhandled exception, "
                "or signal) that forced termination."
            ),
            possible_causes=(
                "Null pointer dereference or buffer overflow (native code)",
                "Unhandled exception or promise rejection (managed code)",
                "Stack overflow from deep recursion",
                "OOM killer terminated the process (see SYS_OOM)",
                "Corrupt application binary or shared library",
                "Hardware failure (faulty RAM, disk errors)",
            ),
            recommended_fixes=(
                "Check the core dump or crash report for the exact error location",
                "Review application logs immediately before the crash",
                "Set up process manager (PM2, systemd) for automatic restart",
                "Add global exception/rejection handlers in your application",
                "Run memory diagnostics: memtest86+ / Windows Memory Diagnostic",
                "Update dependencies and runtime to patch known crash bugs",
                "Implement graceful shutdown and health checks",
            ),
        ),
    ),
    PatternRule(
        id="SYS_FILE_NOT_FOUND",
        name="File or Directory Not Found",
        category=LogCategory.FILESYSTEM,
        matchers=(
            re.compile(r"no\s+such\s+file\s+or\s+directory", _I),
            re.compile(r"ENOENT", _I),
            re.compile(r"FileNotFoundException", _I),
            re.compile(r"file\s+not\s+found", _I),
            re.compile(r"path.*(?:does\s+not\s+exist|not\s+found)", _I),
        ),
        keywords=("ENOENT", "file not found", "no such file", "FileNotFoundException"),
        error_codes=("ENOENT",),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(
                    r"config|env|\.env|settings|application\.(?:yml|properties)", _I
                ),
                severity=SeverityLevel.HIGH,
                reason="Missing configuration file can prevent application startup",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "The application attempted to access a file or directory that does not exist "
                "at the specified path."
            ),
            root_cause=(
                "The referenced file path is incorrect, the file was not created, or it was "
                "deleted/moved."
            ),
            possible_causes=(
                "Incorrect file path in configuration or code",
                "File was deleted, moved, or renamed",
                "Volume or mount not attached (Docker, NFS)",
                "Application running from an unexpected working directory",
                "Missing build artifact (not compiled/built yet)",
                "Environment-specific path not set correctly",
            ),
            recommended_fixes=(
                "Verify the file exists at the expected path: ls / dir",
                "Check the working directory of the application process",
                "Use absolute paths instead of relative paths in configuration",
                "Ensure all required files are included in the deployment package",
                "Check Docker volume mounts if running in a container",
                "Verify file permissions allow read access",
            ),
        ),
    ),
)
