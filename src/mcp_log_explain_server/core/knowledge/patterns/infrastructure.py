"""Caching, email, logging infrastructure and application runtime rules."""

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

INFRASTRUCTURE_PATTERNS: tuple[PatternRule, ...] = (
    # caching
    PatternRule(
        id="CACHE_REDIS_ERROR",
        name="Redis Connection/Command Error",
        category=LogCategory.CACHING,
        matchers=(
            re.compile(r"redis.*(?:connection\s+refused|ECONNREFUSED)", _I),
            re.compile(r"Redis.*(?:error|fail|timeout|NOAUTH|WRONGPASS)", _I),
            re.compile(r"NOAUTH\s+Authentication\s+required", _I),
            re.compile(r"ERR\s+max\s+number\s+of\s+clients\s+reached", _I),
            re.compile(r"redis.*LOADING", _I),
        ),
        keywords=("Redis", "ECONNREFUSED", "NOAUTH", "cache error", "redis timeout"),
        error_codes=("NOAUTH", "WRONGPASS"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A Redis operation failed: the cache layer is unavailable or returned an error. "
                "This may degrade performance or cause failures if caching is critical."
            ),
            root_cause=(
                "Redis is unreachable, requires authentication, or has reached its resource limits."
            ),
            possible_causes=(
                "Redis server is not running or crashed",
                "Redis requires a password (requirepass) but none was provided",
                "Redis max client connections reached",
                "Redis is still loading dataset into memory after restart",
                "Network connectivity issue to the Redis host/port",
                "Redis memory is full and eviction policy is set to noeviction",
            ),
            recommended_fixes=(
                "Check Redis status: redis-cli ping",
                "Verify Redis password in connection configuration",
                "Check Redis memory usage: redis-cli INFO memory",
                "Increase maxclients if the limit is too low",
                "Implement Redis Sentinel or Cluster for high availability",
                "Set appropriate maxmemory-policy (allkeys-lru for cache use cases)",
            ),
        ),
    ),
    PatternRule(
        id="CACHE_MISS_SPIKE",
        name="Cache Miss Rate Spike",
        category=LogCategory.CACHING,
        matchers=(
            re.compile(r"cache\s+miss.*(?:rate|spike|high|increased)", _I),
            re.compile(r"cache\s+hit\s+ratio.*(?:low|dropped|declining)", _I),
            re.compile(r"cache.*(?:cold|warming|invalidated|flushed)", _I),
            re.compile(r"cache\s+stampede", _I),
        ),
        keywords=("cache miss", "cache hit ratio", "cache cold", "stampede"),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "The cache miss rate has spiked significantly, causing more requests to hit the "
                "backend database or API directly."
            ),
            root_cause=(
                "Cached data is missing, expired, or was invalidated, forcing direct backend "
                "lookups."
            ),
            possible_causes=(
                "Cache was recently flushed or the cache server restarted",
                "TTL (time-to-live) is too short for the cached data",
                "Cache stampede: many requests simultaneously filling the same key",
                "Cache eviction due to memory pressure",
                "New deployment with different cache key scheme",
            ),
            recommended_fixes=(
                "Implement cache warming on startup for critical data",
                "Use probabilistic early expiration (cache stampede prevention)",
                "Set appropriate TTL values based on data change frequency",
                "Monitor cache hit/miss ratios with alerting",
                "Implement circuit breaker to protect backend during cache failures",
            ),
        ),
    ),
    # email
    PatternRule(
        id="EMAIL_SMTP_ERROR",
        name="SMTP Email Delivery Error",
        category=LogCategory.EMAIL,
        matchers=(
            re.compile(r"SMTP.*(?:error|fail|refused|timeout)", _I),
            re.compile(r"(?:mail|email).*(?:delivery|send).*(?:fail|error|bounce)", _I),
            re.compile(r"(?:550|552|554).*(?:rejected|denied|spam|relay)", _I),
            re.compile(r"EHLO.*fail", _I),
            re.compile(r"authentication.*fail.*(?:smtp|mail)", _I),
        ),
        keywords=("SMTP", "email", "delivery failed", "bounce", "rejected", "mail server"),
        error_codes=("550", "552", "554", "450", "451"),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"password\s+reset|verification|critical\s+notification", _I),
                severity=SeverityLevel.HIGH,
                reason="Failed delivery of critical transactional emails impacts user experience",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "An email delivery attempt failed. The SMTP server rejected the message or the "
                "connection could not be established."
            ),
            root_cause=(
                "The SMTP server refused the email or the connection failed due to "
                "configuration, authentication, or content issues."
            ),
            possible_causes=(
                "SMTP authentication credentials are incorrect",
                "Sender domain lacks proper SPF/DKIM/DMARC records",
                "Recipient email address does not exist (hard bounce)",
                "Email content flagged as spam by the receiving server",
                "SMTP relay not allowed from this IP address",
                "Mail server rate limit exceeded",
            ),
            recommended_fixes=(
                "Verify SMTP credentials and connection settings (host, port, TLS)",
                "Set up SPF, DKIM, and DMARC records for the sending domain",
                "Implement bounce handling and remove invalid addresses",
                "Use a managed email service (SendGrid, SES, Postmark)",
                "Monitor email deliverability rates and bounce rates",
                "Implement email queuing with retry logic",
            ),
        ),
    ),
    # logging infrastructure
    PatternRule(
        id="LOG_ROTATION_FAIL",
        name="Log Rotation Failure",
        category=LogCategory.LOGGING,
        matchers=(
            re.compile(r"log\s*rotation.*(?:fail|error)", _I),
            re.compile(r"logrotate.*(?:error|fail)", _I),
            re.compile(r"unable\s+to\s+(?:rotate|truncate).*log", _I),
            re.compile(r"log\s+file.*(?:too\s+large|exceeded|growing)", _I),
        ),
        keywords=("logrotate", "log rotation", "log file size", "log truncate"),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "Log file rotation failed, causing log files to grow without bound. This can "
                "eventually fill up the disk."
            ),
            root_cause=(
                "The log rotation mechanism (logrotate, built-in rotation) failed to compress, "
                "archive, or truncate old log files."
            ),
            possible_causes=(
                "Logrotate configuration file has syntax errors",
                "Insufficient permissions to rotate the log file",
                "Application holds an open file handle preventing rotation",
                "Disk space too low to create compressed archive",
                "Logrotate cron job is not running",
            ),
            recommended_fixes=(
                "Test logrotate config: logrotate -d /etc/logrotate.d/<app>",
                "Fix file permissions on the log directory",
                "Use copytruncate directive if the app cannot reopen log files",
                "Verify cron service is running: systemctl status crond",
                "Implement structured logging to a log aggregation service instead",
            ),
        ),
    ),
    # reverse proxy
    PatternRule(
        id="NGINX_BAD_GATEWAY",
        name="Nginx Bad Gateway (502)",
        category=LogCategory.API,
        matchers=(
            re.compile(r"502\s+Bad\s+Gateway", _I),
            re.compile(r"HTTP\s+502", _I),
            re.compile(r"upstream\s+prematurely\s+closed\s+connection", _I),
            re.compile(r"no\s+live\s+upstreams", _I),
            re.compile(r"connect\(\)\s+failed.*upstream", _I),
        ),
        keywords=("502", "bad gateway", "upstream", "nginx", "proxy"),
        error_codes=("502",),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "Nginx returned a 502 Bad Gateway error: the upstream application server is not "
                "responding or crashed."
            ),
            root_cause=(
                "Nginx could not get a valid response from the upstream server that the request "
                "was proxied to."
            ),
            possible_causes=(
                "Upstream application server is crashed or not running",
                "Upstream server is overloaded and dropping connections",
                "PHP-FPM, Gunicorn, or Node.js process pool is exhausted",
                "Upstream connection timeout is too short",
                "Application is listening on the wrong port or socket",
                "Firewall blocking traffic between Nginx and the upstream",
            ),
            recommended_fixes=(
                "Check if the upstream application is running",
                "Review upstream application logs for crashes or errors",
                "Increase proxy_read_timeout and proxy_connect_timeout in nginx.conf",
                "Scale up application server processes/workers",
                "Verify the upstream address and port in the Nginx config",
                "Use health checks to automatically remove unhealthy upstreams",
            ),
        ),
    ),
    # database locking
    PatternRule(
        id="DB_DEADLOCK",
        name="Database Deadlock Detected",
        category=LogCategory.DATABASE,
        matchers=(
            re.compile(r"deadlock\s+detected", _I),
            re.compile(r"Deadlock\s+found", _I),
            re.compile(r"deadlock.*victim", _I),
            re.compile(r"transaction.*deadlock", _I),
            re.compile(r"Error\s+1213", _I),
        ),
        keywords=("deadlock", "deadlock detected", "deadlock victim", "transaction conflict"),
        error_codes=("1213", "40P01"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A database deadlock was detected: two or more transactions are waiting for each "
                "other to release locks, creating a circular dependency."
            ),
            root_cause=(
                "Concurrent transactions acquired locks in conflicting orders, creating a cycle "
                "that the database had to break by killing one transaction."
            ),
            possible_causes=(
                "Transactions updating the same rows in different orders",
                "Long-running transactions holding locks for extended periods",
                "Missing or incorrect indexes causing full table locks",
                "Application not using consistent lock ordering",
                "High concurrency on frequently updated rows",
            ),
            recommended_fixes=(
                "Implement consistent lock ordering across all transactions",
                "Keep transactions short and focused",
                "Add proper indexes to reduce lock scope (row-level vs table-level)",
                "Implement retry logic for deadlock victims (the rolled-back transaction)",
                "Use SELECT ... FOR UPDATE NOWAIT to fail fast instead of waiting",
                "Review deadlock graphs: SHOW ENGINE INNODB STATUS (MySQL)",
            ),
        ),
    ),
    # application runtime
    PatternRule(
        id="APP_STACK_OVERFLOW",
        name="Stack Overflow / Recursion Limit",
        category=LogCategory.APPLICATION,
        matchers=(
            re.compile(r"stack\s*overflow", _I),
            re.compile(r"Maximum\s+call\s+stack\s+size\s+exceeded", _I),
            re.compile(r"RecursionError", _I),
            re.compile(r"StackOverflowError", _I),
            re.compile(r"maximum\s+recursion\s+depth\s+exceeded", _I),
        ),
        keywords=("stack overflow", "recursion", "call stack", "RecursionError"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "The application hit a stack overflow due to excessive recursion or deeply "
                "nested function calls."
            ),
            root_cause=(
                "An infinite or excessively deep recursive function call exhausted the call stack."
            ),
            possible_causes=(
                "Infinite recursion due to missing or incorrect base case",
                "Circular dependency between modules or functions",
                "Deeply nested data structure being processed recursively",
                "Event handler triggering itself in an infinite loop",
                "Misconfigured middleware creating a request loop",
            ),
            recommended_fixes=(
                "Review recursive functions for proper base cases / termination conditions",
                "Convert deep recursion to iterative approach with an explicit stack",
                "Implement recursion depth limits as safety guards",
                "Check for circular references in data structures",
                "Use tail-call optimization where supported",
                "Increase stack size if the deep recursion is intentional: --stack-size flag",
            ),
        ),
    ),
    PatternRule(
        id="APP_UNHANDLED_PROMISE",
        name="Unhandled Promise Rejection",
        category=LogCategory.APPLICATION,
        matchers=(
            re.compile(r"UnhandledPromiseRejection", _I),
            re.compile(r"unhandled\s+promise\s+rejection", _I),
            re.compile(r"PromiseRejectionHandledWarning", _I),
            re.compile(r"Unhandled\s+Rejection", _I),
            re.compile(r"unhandled.*(?:error|rejection).*(?:promise|async)", _I),
        ),
        keywords=("unhandled promise", "rejection", "promise rejection", "async error"),
        severity=SeverityLevel.HIGH,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"process.*exit|crash|terminate", _I),
                severity=SeverityLevel.CRITICAL,
                reason=(
                    "Unhandled promise rejections can cause the Node.js process to exit in "
                    "newer versions"
                ),
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "An async operation (Promise) was rejected but no error handler was attached. "
                "In Node.js 15+, this terminates the process."
            ),
            root_cause=(
                "A rejected Promise does not have a .catch() handler or is not inside a "
                "try/catch within an async function."
            ),
            possible_causes=(
                "Missing .catch() or try/catch around async/await calls",
                "Forgotten await on an async function that throws",
                "Error in a callback passed to a Promise",
                "Race condition causing rejection after the handler is removed",
                "Third-party library rejecting a promise unexpectedly",
            ),
            recommended_fixes=(
                "Add .catch() to all Promises or use try/catch with async/await",
                'Set up a global handler: process.on("unhandledRejection", handler)',
                "Use a linting rule (no-floating-promises) to catch missing await/catch",
                "Review async code for missing error handling paths",
                "Implement centralized error handling middleware (Express/Koa)",
            ),
        ),
    ),
    PatternRule(
        id="APP_TYPE_ERROR",
        name="TypeError / Null Reference",
        category=LogCategory.APPLICATION,
        matchers=(
            re.compile(r"TypeError.*(?:undefined|null|not\s+a\s+function|not\s+iterable)", _I),
            re.compile(r"Cannot\s+read\s+propert.*of\s+(?:undefined|null)", _I),
            re.compile(r"NullPointerException", _I),
            re.compile(r"NullReferenceException", _I),
            re.compile(r"AttributeError.*NoneType", _I),
            re.compile(r"is\s+not\s+a\s+function", _I),
        ),
        keywords=(
            "TypeError",
            "undefined",
            "null",
            "NullPointerException",
            "NullReferenceException",
        ),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"production|prod|live", _I),
                severity=SeverityLevel.HIGH,
                reason="TypeErrors in production indicate untested code paths",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "A TypeError or null reference error occurred: the code attempted to use a "
                "value that is undefined or null as if it were a valid object."
            ),
            root_cause=(
                "A variable or property is null/undefined when the code expected a valid value."
            ),
            possible_causes=(
                "API response missing expected fields",
                "Database query returning null instead of an object",
                "Accessing a property before async data is loaded",
                "Incorrect destructuring of undefined objects",
                "Missing null checks after optional chaining",
                "State management issue (accessing before initialization)",
            ),
            recommended_fixes=(
                "Add null checks: use optional chaining (?.) and nullish coalescing (??)",
                "Validate API responses before accessing nested properties",
                "Initialize variables with default values",
                "Use TypeScript strict null checks to catch these at compile time",
                "Add unit tests for edge cases with null/undefined inputs",
                "Implement defensive programming patterns at data boundaries",
            ),
        ),
    ),
    PatternRule(
        id="APP_MEMORY_LEAK",
        name="Memory Leak Detected",
        category=LogCategory.MEMORY,
        matchers=(
            re.compile(r"memory\s+leak", _I),
            re.compile(r"heap\s+(?:size|used|total).*(?:growing|increasing|exceeded)", _I),
            re.compile(r"possible\s+memory\s+leak", _I),
            re.compile(r"EventEmitter\s+memory\s+leak", _I),
            re.compile(r"MaxListenersExceeded", _I),
            re.compile(r"--max-old-space-size", _I),
        ),
        keywords=("memory leak", "heap growing", "EventEmitter", "MaxListenersExceeded"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A potential memory leak was detected: memory usage is continuously growing "
                "without being released, eventually leading to OOM crashes."
            ),
            root_cause=(
                "Objects are being allocated but never garbage collected, typically due to "
                "retained references."
            ),
            possible_causes=(
                "Event listeners being added without removal (EventEmitter leak)",
                "Global variables accumulating data over time",
                "Caches growing without eviction limits",
                "Closures retaining references to large objects",
                "Database connections or HTTP responses not being closed",
                "Circular references preventing garbage collection",
            ),
            recommended_fixes=(
                "Profile heap usage: node --inspect and Chrome DevTools Memory tab",
                "Set max listeners: emitter.setMaxListeners(N) or fix the leak",
                "Implement cache size limits with LRU eviction",
                "Ensure all event listeners are removed on cleanup: removeListener()",
                "Use WeakMap/WeakRef for object references that should be GC-eligible",
                "Monitor RSS/heap size over time to detect gradual growth",
            ),
        ),
    ),
    PatternRule(
        id="APP_CORS_PREFLIGHT",
        name="CORS Preflight Request Failure",
        category=LogCategory.API,
        matchers=(
            re.compile(r"preflight.*(?:fail|error|blocked)", _I),
            re.compile(r"OPTIONS.*(?:405|403|blocked)", _I),
            re.compile(r"No\s+'Access-Control-Allow-Origin'", _I),
            re.compile(r"CORS.*header.*missing", _I),
            re.compile(r"Method\s+not\s+allowed.*OPTIONS", _I),
        ),
        keywords=("preflight", "OPTIONS", "CORS", "Access-Control", "cross-origin"),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "A CORS preflight (OPTIONS) request was blocked or rejected, preventing the "
                "browser from making the actual cross-origin request."
            ),
            root_cause=(
                "The server does not handle OPTIONS requests correctly or is missing required "
                "CORS response headers."
            ),
            possible_causes=(
                "Server does not respond to OPTIONS requests (405 Method Not Allowed)",
                "Access-Control-Allow-Origin header not set or mismatched",
                "Custom headers used without Access-Control-Allow-Headers listing them",
                "Credentials mode enabled but wildcard (*) origin used",
                "API gateway or reverse proxy stripping CORS headers",
            ),
            recommended_fixes=(
                "Add CORS middleware to handle OPTIONS preflight requests",
                "Set Access-Control-Allow-Origin to the specific frontend domain",
                "List all custom headers in Access-Control-Allow-Headers",
                "Do not use wildcard origin (*) if credentials are needed",
                "Ensure the reverse proxy/CDN forwards CORS headers correctly",
            ),
        ),
    ),
    PatternRule(
        id="APP_TIMEZONE_ERROR",
        name="Timezone / Date Parsing Error",
        category=LogCategory.APPLICATION,
        matchers=(
            re.compile(r"(?:invalid|unexpected)\s+(?:date|time)", _I),
            re.compile(r"timezone.*(?:error|invalid|mismatch)", _I),
            re.compile(r"RangeError.*Invalid\s+time\s+value", _I),
            re.compile(r"NaN.*(?:date|time|timestamp)", _I),
            re.compile(r"date.*parsing.*(?:fail|error)", _I),
        ),
        keywords=("invalid date", "timezone error", "time parsing", "NaN date", "timestamp"),
        severity=SeverityLevel.LOW,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"billing|payment|schedule|cron|deadline", _I),
                severity=SeverityLevel.HIGH,
                reason="Date/time errors in billing, scheduling, or deadlines have business impact",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "A date or time value could not be parsed correctly, resulting in an invalid "
                "date, NaN, or timezone mismatch."
            ),
            root_cause=(
                "The date/time string format does not match the expected format, or timezone "
                "handling is inconsistent."
            ),
            possible_causes=(
                "Date string format differs between environments (US vs EU format)",
                "Missing timezone information causing implicit UTC/local conversions",
                "JavaScript Date constructor receiving an unparseable string",
                "Database returning dates in a different format than expected",
                "Daylight Saving Time (DST) transitions causing off-by-one hour errors",
            ),
            recommended_fixes=(
                "Use ISO 8601 (YYYY-MM-DDTHH:mm:ssZ) for all date communications",
                "Store and transmit all dates in UTC, convert to local only for display",
                "Use a robust date library (date-fns, luxon, dayjs) instead of native Date",
                "Validate date inputs before processing",
                "Set the server timezone explicitly: TZ=UTC",
            ),
        ),
    ),
)
