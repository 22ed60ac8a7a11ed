"""HTTP/API rules: rate limits, timeouts, 4xx/5xx responses, CORS."""

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

API_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="API_RATE_LIMITED",
        name="API Rate Limit Exceeded",
        category=LogCategory.API,
        matchers=(
            re.compile(r"rate\s*limit.*exceeded", _I),
            re.compile(r"429\s+Too\s+Many\s+Requests", _I),
            re.compile(r"HTTP\s+429", _I),
            re.compile(r"throttl", _I),
            re.compile(r"too\s+many\s+requests", _I),
            re.compile(r"quota.*exceeded", _I),
        ),
        keywords=("rate limit", "429", "too many requests", "throttle", "quota exceeded"),
        error_codes=("429",),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"payment|billing|critical.*api", _I),
                severity=SeverityLevel.HIGH,
                reason="Rate limiting on critical business APIs impacts revenue",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "The API rejected the request because the client has exceeded the maximum "
                "allowed number of requests within the rate limit window."
            ),
            root_cause=(
                "The client is sending requests faster than the API's rate limit policy allows."
            ),
            possible_causes=(
                "Client sending too many requests in a short period",
                "Missing or broken request throttling on the client side",
                "Retry logic without backoff flooding the API",
                "Rate limit tier too restrictive for the workload",
                "Multiple clients sharing the same API key",
                "Batch operation not using the bulk/batch endpoint",
            ),
            recommended_fixes=(
                "Implement exponential backoff with jitter on retries",
                "Respect the Retry-After header in 429 responses",
                "Use batch/bulk endpoints instead of individual requests",
                "Cache responses to reduce redundant API calls",
                "Request a higher rate limit tier from the API provider",
                "Distribute requests across multiple API keys if allowed",
            ),
        ),
    ),
    PatternRule(
        id="API_TIMEOUT",
        name="API Request Timeout",
        category=LogCategory.TIMEOUT,
        matchers=(
            re.compile(r"request\s+timed?\s*out", _I),
            re.compile(r"gateway\s+time[\s-]?out", _I),
            re.compile(r"504\s+Gateway\s+Time[\s-]?out", _I),
            re.compile(r"HTTP\s+504", _I),
            re.compile(r"upstream\s+timed?\s*out", _I),
            re.compile(r"proxy.*timeout", _I),
        ),
        keywords=("request timeout", "gateway timeout", "504", "upstream timeout"),
        error_codes=("504",),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "An API request timed out before receiving a response. The upstream server or "
                "service was too slow to respond within the gateway's timeout window."
            ),
            root_cause=(
                "The upstream service processing the request exceeded the timeout threshold."
            ),
            possible_causes=(
                "Upstream service is overloaded or unresponsive",
                "Slow database queries backing the API endpoint",
                "Gateway/proxy timeout configured too low",
                "Network latency between proxy and upstream service",
                "Resource-intensive computation triggered by the request",
                "Deadlock or thread starvation in the upstream service",
            ),
            recommended_fixes=(
                "Check upstream service health and response times",
                "Increase gateway timeout if the operation is legitimately slow",
                "Optimize the slow upstream operation (query, computation)",
                "Implement async processing for long-running operations",
                "Add circuit breakers to prevent cascading timeouts",
                "Use request queuing and webhook callbacks for slow operations",
            ),
        ),
    ),
    PatternRule(
        id="API_BAD_REQUEST",
        name="Bad Request / Validation Error",
        category=LogCategory.API,
        matchers=(
            re.compile(r"400\s+Bad\s+Request", _I),
            re.compile(r"HTTP\s+400", _I),
            re.compile(r"validation\s+(?:error|fail)", _I),
            re.compile(r"invalid\s+(?:request|payload|input|parameter)", _I),
            re.compile(r"malformed\s+(?:JSON|request|body)", _I),
            re.compile(r"SyntaxError.*JSON", _I),
        ),
        keywords=("400", "bad request", "validation error", "invalid request", "malformed JSON"),
        error_codes=("400",),
        severity=SeverityLevel.LOW,
        explanation=ExplanationTemplate(
            summary=(
                "The API request was rejected because the request body, parameters, or headers "
                "are malformed or fail validation rules."
            ),
            root_cause="The client sent a request that does not conform to the expected API schema.",
            possible_causes=(
                "Missing required fields in the request body",
                "Incorrect data types (string instead of number, etc.)",
                "Malformed JSON syntax in the request body",
                "Invalid enum value or out-of-range parameter",
                "API version mismatch: client using outdated request format",
                "Character encoding issues in the payload",
            ),
            recommended_fixes=(
                "Review the API documentation for the correct request schema",
                "Validate request payloads before sending (client-side validation)",
                "Check Content-Type header is set to application/json",
                "Use API client libraries or SDKs that enforce correct types",
                "Log and inspect the exact request being sent",
                "Verify you are targeting the correct API version",
            ),
        ),
    ),
    PatternRule(
        id="API_INTERNAL_ERROR",
        name="Internal Server Error",
        category=LogCategory.APPLICATION,
        matchers=(
            re.compile(r"500\s+Internal\s+Server\s+Error", _I),
            re.compile(r"HTTP\s+500", _I),
            re.compile(r"internal\s+server\s+error", _I),
            re.compile(r"unhandled.*(?:error|exception)", _I),
            re.compile(r"unexpected\s+error", _I),
        ),
        keywords=("500", "internal server error", "unhandled exception", "unexpected error"),
        error_codes=("500",),
        severity=SeverityLevel.HIGH,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"repeated|frequent|multiple", _I),
                severity=SeverityLevel.CRITICAL,
                reason="Recurring 500 errors indicate a systemic bug or infrastructure failure",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "The server encountered an unexpected error while processing the request. This "
                "is a server-side issue, not a client error."
            ),
            root_cause=(
                "An unhandled exception or unexpected condition occurred in the server "
                "application code."
            ),
            possible_causes=(
                "Unhandled exception in application business logic",
                "Null reference or undefined variable access",
                "Database connection failure during request processing",
                "Dependency service (external API) returned unexpected data",
                "Application deployment or configuration error",
                "Corrupt application state or race condition",
            ),
            recommended_fixes=(
                "Check server application logs for the full stack trace",
                "Add comprehensive error handling and try-catch blocks",
                "Set up error tracking (Sentry, Bugsnag, Datadog)",
                "Review recent deployments that may have introduced the bug",
                "Test the failing request in a staging environment",
                "Implement circuit breakers for external dependency calls",
            ),
        ),
    ),
    PatternRule(
        id="API_SERVICE_UNAVAILABLE",
        name="Service Unavailable",
        category=LogCategory.API,
        matchers=(
            re.compile(r"503\s+Service\s+Unavailable", _I),
            re.compile(r"HTTP\s+503", _I),
            re.compile(r"service\s+unavailable", _I),
            re.compile(r"server\s+(?:is\s+)?(?:down|unavailable|overloaded)", _I),
            re.compile(r"maintenance\s+mode", _I),
        ),
        keywords=("503", "service unavailable", "server down", "maintenance"),
        error_codes=("503",),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "The service is currently unavailable: it may be overloaded, under maintenance, "
                "or experiencing a failure. Requests cannot be processed."
            ),
            root_cause=(
                "The server is unable to handle requests due to overload, maintenance, or a crash."
            ),
            possible_causes=(
                "Server is overloaded and cannot accept new requests",
                "Planned maintenance window in effect",
                "Application crash with no healthy instances available",
                "Health checks failing, causing load balancer to remove all backends",
                "Auto-scaling has not yet provisioned enough instances",
                "Deployment in progress (rolling update)",
            ),
            recommended_fixes=(
                "Check the Retry-After header for expected recovery time",
                "Verify server health and instance counts",
                "Scale up or out to handle current load",
                "Check deployment status: rolling updates may cause brief 503s",
                "Review health check configuration for false negatives",
                "Implement graceful degradation and circuit breakers",
            ),
        ),
    ),
    PatternRule(
        id="API_CORS_ERROR",
        name="CORS Policy Error",
        category=LogCategory.API,
        matchers=(
            re.compile(r"CORS.*(?:error|policy|block)", _I),
            re.compile(r"Access-Control-Allow-Origin", _I),
            re.compile(r"cross[\s-]?origin.*block", _I),
            re.compile(r"No 'Access-Control-Allow-Origin' header", _I),
            re.compile(r"preflight.*fail", _I),
        ),
        keywords=("CORS", "cross-origin", "Access-Control-Allow-Origin", "preflight"),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "The browser blocked a cross-origin request because the server's CORS policy "
                "does not allow it. This is a client-side security enforcement."
            ),
            root_cause=(
                "The server does not include the requesting origin in its "
                "Access-Control-Allow-Origin headers."
            ),
            possible_causes=(
                "Server CORS configuration does not include the client origin",
                "Missing or incorrect Access-Control-Allow-Origin header",
                "Preflight OPTIONS request failing or not handled",
                "Wildcard (*) CORS not allowed with credentials",
                "Proxy or CDN stripping CORS headers",
                "API gateway not configured to pass CORS headers through",
            ),
            recommended_fixes=(
                "Add the client origin to the server CORS allowed origins list",
                "Ensure OPTIONS preflight requests return correct CORS headers",
                "Set Access-Control-Allow-Methods and Access-Control-Allow-Headers",
                "If using credentials, specify exact origins (not wildcard *)",
                "Check reverse proxy (Nginx, API Gateway) CORS header configuration",
                "Use a CORS middleware in your framework (e.g., cors() in Express)",
            ),
        ),
    ),
)
