"""Network rules: timeouts, DNS, resets, TLS, port binding."""

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

NETWORK_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="NET_CONN_TIMEOUT",
        name="Network Connection Timeout",
        category=LogCategory.NETWORK,
        matchers=(
            re.compile(r"ETIMEDOUT", _I),
            re.compile(r"connection\s+timed?\s*out", _I),
            re.compile(r"connect\s+ETIMEDOUT", _I),
            re.compile(r"network\s+timeout", _I),
            re.compile(r"socket\s+timeout", _I),
        ),
        keywords=("ETIMEDOUT", "connection timeout", "socket timeout"),
        error_codes=("ETIMEDOUT",),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A network connection attempt to a remote host timed out. The target server "
                "did not respond within the allowed time window."
            ),
            root_cause=(
                "The remote host is unreachable or too slow to respond within the timeout period."
            ),
            possible_causes=(
                "Remote server is down or unreachable",
                "Firewall blocking outbound or inbound traffic on the target port",
                "DNS resolution returning incorrect IP address",
                "Network congestion or packet loss along the route",
                "Timeout value set too low for the expected response time",
                "Target service overloaded and not accepting connections",
            ),
            recommended_fixes=(
                "Test connectivity to the target host: ping / traceroute / curl",
                "Verify firewall and security group rules allow the connection",
                "Check DNS resolution: nslookup / dig for the target hostname",
                "Increase the connection timeout value if appropriate",
                "Contact the remote service operator to verify service health",
                "Implement retry logic with exponential backoff",
            ),
        ),
    ),
    PatternRule(
        id="NET_DNS_FAILURE",
        name="DNS Resolution Failure",
        category=LogCategory.DNS,
        matchers=(
            re.compile(r"ENOTFOUND", _I),
            re.compile(r"getaddrinfo\s+ENOTFOUND", _I),
            re.compile(r"DNS.*(?:fail|error|timeout)", _I),
            re.compile(r"name\s+resolution.*failed", _I),
            re.compile(r"could\s+not\s+resolve\s+host", _I),
            re.compile(r"NXDOMAIN", _I),
        ),
        keywords=("ENOTFOUND", "DNS", "name resolution", "getaddrinfo"),
        error_codes=("ENOTFOUND", "NXDOMAIN"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "The system failed to resolve a hostname to an IP address via DNS. The "
                "requested domain name could not be found."
            ),
            root_cause=(
                "DNS lookup failed: the hostname does not exist, DNS servers are unreachable, "
                "or there is a misconfiguration."
            ),
            possible_causes=(
                "Hostname is misspelled in the configuration",
                "Domain name does not exist or has expired",
                "DNS server is down or unreachable",
                "Network partitioning preventing DNS queries",
                "DNS cache poisoning or stale cached records",
                "/etc/resolv.conf or OS DNS settings misconfigured",
            ),
            recommended_fixes=(
                "Verify the hostname spelling in your configuration",
                "Test DNS resolution manually: nslookup <hostname> or dig <hostname>",
                "Check /etc/resolv.conf (Linux) or network DNS settings",
                "Try using a public DNS server (8.8.8.8) temporarily to isolate the issue",
                "Flush DNS cache: systemd-resolve --flush-caches / ipconfig /flushdns",
                "Verify the domain is registered and not expired",
            ),
        ),
    ),
    PatternRule(
        id="NET_CONN_RESET",
        name="Connection Reset by Peer",
        category=LogCategory.NETWORK,
        matchers=(
            re.compile(r"ECONNRESET", _I),
            re.compile(r"connection\s+reset\s+by\s+peer", _I),
            re.compile(r"read\s+ECONNRESET", _I),
            re.compile(r"broken\s+pipe", _I),
            re.compile(r"EPIPE", _I),
        ),
        keywords=("ECONNRESET", "connection reset", "broken pipe", "EPIPE"),
        error_codes=("ECONNRESET", "EPIPE"),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"repeated|multiple|frequent", _I),
                severity=SeverityLevel.HIGH,
                reason="Frequent connection resets indicate a systemic issue",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "The remote server forcibly closed the connection while data was being "
                "transferred. This is an abrupt termination, not a graceful disconnect."
            ),
            root_cause=(
                "The peer terminated the TCP connection unexpectedly, possibly due to a crash, "
                "timeout, or load balancer eviction."
            ),
            possible_causes=(
                "Remote server crashed or restarted during the request",
                "Load balancer terminated an idle or long-running connection",
                "Server-side timeout or max request size exceeded",
                "TLS/SSL handshake failure causing abrupt disconnect",
                "Network device (proxy/firewall) dropping long-lived connections",
                "Server resource exhaustion forcing connection termination",
            ),
            recommended_fixes=(
                "Implement retry logic with exponential backoff for transient failures",
                "Check the remote server's health and error logs",
                "Review load balancer timeout and keepalive settings",
                "Ensure request payloads are within server-side size limits",
                "Use HTTP keep-alive headers correctly",
                "Monitor connection reset frequency to identify patterns",
            ),
        ),
    ),
    PatternRule(
        id="NET_SSL_ERROR",
        name="SSL/TLS Handshake Error",
        category=LogCategory.SSL_TLS,
        matchers=(
            re.compile(r"SSL.*(?:handshake|error|fail)", _I),
            re.compile(r"TLS.*(?:handshake|error|fail)", _I),
            re.compile(r"certificate.*(?:expired|invalid|untrusted|verify)", _I),
            re.compile(r"UNABLE_TO_VERIFY_LEAF_SIGNATURE", _I),
            re.compile(r"CERT_HAS_EXPIRED", _I),
            re.compile(r"DEPTH_ZERO_SELF_SIGNED_CERT", _I),
            re.compile(r"ERR_TLS_CERT_ALTNAME_INVALID", _I),
            re.compile(r"self[\s-]signed\s+certificate", _I),
        ),
        keywords=("SSL", "TLS", "certificate", "handshake", "self-signed"),
        error_codes=(
            "UNABLE_TO_VERIFY_LEAF_SIGNATURE",
            "CERT_HAS_EXPIRED",
            "DEPTH_ZERO_SELF_SIGNED_CERT",
            "ERR_TLS_CERT_ALTNAME_INVALID",
        ),
        severity=SeverityLevel.HIGH,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"expired", _I),
                severity=SeverityLevel.CRITICAL,
                reason="Expired certificate will break all HTTPS connections",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "A TLS/SSL connection could not be established due to a certificate problem. "
                "The secure connection was rejected."
            ),
            root_cause=(
                "The SSL/TLS certificate is invalid, expired, self-signed, or does not match "
                "the expected hostname."
            ),
            possible_causes=(
                "SSL certificate has expired and not been renewed",
                "Self-signed certificate used in a production environment",
                "Certificate does not match the domain (CN/SAN mismatch)",
                "Missing intermediate CA certificate in the chain",
                "TLS version or cipher suite mismatch between client and server",
                "System CA certificate bundle is outdated",
            ),
            recommended_fixes=(
                "Check certificate expiry: openssl s_client -connect <host>:443",
                "Renew the expired certificate via your CA or Let's Encrypt",
                "Ensure the full certificate chain (including intermediates) is installed",
                "Verify the certificate covers the correct hostname (CN/SAN)",
                "Update the system CA certificates: update-ca-certificates",
                "Do NOT disable TLS validation in production (NODE_TLS_REJECT_UNAUTHORIZED=0)",
            ),
        ),
    ),
    PatternRule(
        id="NET_PORT_IN_USE",
        name="Port Already in Use",
        category=LogCategory.NETWORK,
        matchers=(
            re.compile(r"EADDRINUSE", _I),
            re.compile(r"address\s+already\s+in\s+use", _I),
            re.compile(r"port.*already\s+(?:in\s+use|bound|taken)", _I),
            re.compile(r"bind.*EADDRINUSE", _I),
        ),
        keywords=("EADDRINUSE", "address in use", "port in use"),
        error_codes=("EADDRINUSE",),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "The application failed to start because the requested port is already being "
                "used by another process."
            ),
            root_cause=(
                "Another process is already listening on the same port, preventing this "
                "application from binding."
            ),
            possible_causes=(
                "A previous instance of the application is still running",
                "Another service is using the same port",
                "Application crashed without releasing the port (lingering socket)",
                "Docker container or VM still holding the port",
                "OS-level port reservation conflict",
            ),
            recommended_fixes=(
                "Find the process using the port: lsof -i :<port> (Linux) or "
                "netstat -ano | findstr :<port> (Windows)",
                "Kill the conflicting process or change your application port",
                "Wait for TIME_WAIT socket state to expire (or enable SO_REUSEADDR)",
                "Check for zombie processes: ps aux | grep <app_name>",
                "Use a different port via environment configuration",
            ),
        ),
    ),
)
