"""Database rules: connectivity, timeouts, credentials, pooling, replication."""

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

DATABASE_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="DB_CONN_REFUSED",
        name="Database Connection Refused",
        category=LogCategory.DATABASE,
        matchers=(
            re.compile(r"connection\s+refused.*(?:5432|3306|27017|6379|1433)", _I),
            re.compile(r"ECONNREFUSED.*(?:5432|3306|27017|6379|1433)", _I),
            re.compile(r"ECONNREFUSED.*(?:postgres|mysql|mongo|redis|mssql)", _I),
            re.compile(r"could\s+not\s+connect\s+to\s+(?:server|database)", _I),
            re.compile(r"connection\s+to\s+.*\s+refused", _I),
        ),
        keywords=("connection refused", "ECONNREFUSED", "could not connect"),
        error_codes=("ECONNREFUSED", "CR_CONN_HOST_ERROR"),
        severity=SeverityLevel.HIGH,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"production|prod", _I),
                severity=SeverityLevel.CRITICAL,
                reason="Database connection failure in production environment",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "The application failed to establish a connection to the database server. "
                "The database is either not running, unreachable, or rejecting connections "
                "on the specified port."
            ),
            root_cause=(
                "The database service is unreachable: it may be stopped, crashed, or blocked "
                "by a firewall."
            ),
            possible_causes=(
                "Database service is not running or has crashed",
                "Firewall or security group blocking the database port",
                "Incorrect host or port in database connection string",
                "Database server is overloaded and refusing new connections",
                "Network partition between application and database servers",
                "Database max connections limit reached",
            ),
            recommended_fixes=(
                "Verify the database service is running: systemctl status postgresql / mysql",
                "Check the connection string (host, port, credentials) in your config",
                "Ensure firewall rules allow traffic on the database port",
                "Check database max_connections setting and current active connections",
                "Test network connectivity: telnet <db_host> <db_port>",
                "Review database server logs for crash or startup errors",
            ),
        ),
    ),
    PatternRule(
        id="DB_TIMEOUT",
        name="Database Query Timeout",
        category=LogCategory.DATABASE,
        matchers=(
            re.compile(r"query\s+timed?\s*out", _I),
            re.compile(r"statement\s+timeout", _I),
            re.compile(r"lock\s+wait\s+timeout\s+exceeded", _I),
            re.compile(r"canceling\s+statement\s+due\s+to\s+statement\s+timeout", _I),
            re.compile(r"Error\s+Code:\s*1205", _I),
        ),
        keywords=("query timeout", "statement timeout", "lock wait timeout"),
        error_codes=("1205", "57014"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A database query exceeded its maximum allowed execution time and was "
                "terminated. This typically indicates a slow query, missing indexes, or a "
                "deadlock."
            ),
            root_cause=(
                "The query took longer than the configured timeout threshold, likely due to "
                "inefficient query execution or resource contention."
            ),
            possible_causes=(
                "Missing or inefficient database indexes on queried columns",
                "Full table scan on a large table",
                "Deadlock or lock contention between concurrent transactions",
                "Database server under heavy load or resource exhaustion",
                "Complex query with multiple JOINs on large datasets",
                "Insufficient server resources (CPU, memory, I/O)",
            ),
            recommended_fixes=(
                "Run EXPLAIN/EXPLAIN ANALYZE on the slow query to identify bottlenecks",
                "Add appropriate indexes on frequently queried columns",
                "Optimize the query to reduce complexity (avoid SELECT *, use LIMIT)",
                "Increase the statement timeout if the query is legitimately long-running",
                "Check for deadlocks in the database logs",
                "Consider query caching or materialized views for complex reports",
            ),
        ),
    ),
    PatternRule(
        id="DB_AUTH_FAILED",
        name="Database Authentication Failed",
        category=LogCategory.DATABASE,
        matchers=(
            re.compile(r"password\s+authentication\s+failed", _I),
            re.compile(r"access\s+denied\s+for\s+user", _I),
            re.compile(r"authentication\s+failed.*database", _I),
            re.compile(r"Login\s+failed\s+for\s+user", _I),
            re.compile(r"FATAL:\s+password\s+authentication\s+failed\s+for\s+user", _I),
        ),
        keywords=("authentication failed", "access denied", "login failed", "password"),
        error_codes=("28P01", "1045", "18456"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "The database rejected the connection because the supplied username or "
                "password is incorrect. The application cannot authenticate with the database."
            ),
            root_cause="Invalid credentials provided in the database connection configuration.",
            possible_causes=(
                "Incorrect password in connection string or environment variable",
                "Database user does not exist",
                "Password was recently changed but not updated in app config",
                "Database authentication method mismatch (e.g., md5 vs scram-sha-256)",
                "User lacks required privileges for the target database",
                "Host-based authentication rules (pg_hba.conf) reject the connection",
            ),
            recommended_fixes=(
                "Verify database credentials in your environment/config files",
                "Test login manually: psql -U <user> -h <host> <database>",
                "Reset the database user password if unsure",
                "Check pg_hba.conf (PostgreSQL) or user grants (MySQL) for access rules",
                "Ensure the user has CONNECT privilege on the target database",
                "Verify the authentication method matches what the client supports",
            ),
        ),
    ),
    PatternRule(
        id="DB_POOL_EXHAUSTED",
        name="Database Connection Pool Exhausted",
        category=LogCategory.DATABASE,
        matchers=(
            re.compile(r"connection\s+pool\s+(?:exhausted|full|maxed|saturated)", _I),
            re.compile(r"too\s+many\s+connections", _I),
            re.compile(r"remaining\s+connection\s+slots\s+are\s+reserved", _I),
            re.compile(r"FATAL:\s+too\s+many\s+connections", _I),
            re.compile(r"max_connections", _I),
        ),
        keywords=("connection pool", "too many connections", "pool exhausted"),
        error_codes=("53300",),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "The database connection pool has reached its maximum capacity. New "
                "connection requests are being rejected, which will cause application errors "
                "and downtime."
            ),
            root_cause=(
                "All available database connections are in use, and no connections can be "
                "allocated for new requests."
            ),
            possible_causes=(
                "Connection leak: connections not being returned to the pool",
                "Sudden traffic spike exhausting the connection pool",
                "Pool size configured too low for current workload",
                "Long-running transactions holding connections for too long",
                "Multiple application instances sharing the same pool limit",
                "Database max_connections setting is too restrictive",
            ),
            recommended_fixes=(
                "Review and increase pool size (poolMin/poolMax) settings",
                "Audit code for connection leaks (unreleased connections)",
                "Use connection pool monitoring to track utilization",
                "Implement connection timeout and idle connection reaping",
                "Consider using PgBouncer or ProxySQL for connection pooling",
                "Increase database max_connections if server resources allow",
            ),
        ),
    ),
    PatternRule(
        id="DB_REPLICATION_LAG",
        name="Database Replication Lag",
        category=LogCategory.DATABASE,
        matchers=(
            re.compile(r"replication\s+lag", _I),
            re.compile(r"slave\s+(?:is\s+)?behind\s+master", _I),
            re.compile(r"replica.*behind", _I),
            re.compile(r"Seconds_Behind_Master:\s*\d+", _I),
        ),
        keywords=("replication lag", "slave behind", "replica behind"),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"lag.*(?:\d{3,}|seconds)", _I),
                severity=SeverityLevel.HIGH,
                reason="Replication lag exceeds acceptable threshold",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "The database replica is falling behind the primary server. Data read from "
                "replicas may be stale, which can cause inconsistencies in read operations."
            ),
            root_cause="The replica cannot keep up with the rate of writes on the primary database.",
            possible_causes=(
                "Heavy write workload on the primary server",
                "Network latency between primary and replica",
                "Replica server has insufficient CPU/IO resources",
                "Large transactions or DDL operations blocking replication",
                "Disk I/O bottleneck on the replica",
            ),
            recommended_fixes=(
                "Monitor replication lag metrics continuously",
                "Scale up replica server resources (CPU, memory, faster disks)",
                "Optimize write-heavy queries on the primary",
                "Consider parallel replication for multi-threaded apply",
                "Route time-sensitive reads to the primary temporarily",
                "Break large transactions into smaller batches",
            ),
        ),
    ),
)
