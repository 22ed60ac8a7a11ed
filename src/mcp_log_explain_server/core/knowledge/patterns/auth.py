"""Authentication, authorization and brute-force rules."""

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

AUTH_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="AUTH_LOGIN_FAILED",
        name="Authentication Login Failed",
        category=LogCategory.AUTHENTICATION,
        matchers=(
            re.compile(r"authentication\s+fail", _I),
            re.compile(r"login\s+fail", _I),
            re.compile(r"invalid\s+(?:credentials|username|password)", _I),
            re.compile(r"unauthorized.*login", _I),
            re.compile(r"failed\s+password\s+for", _I),
            re.compile(r"pam_unix.*authentication\s+failure", _I),
        ),
        keywords=(
            "login failed",
            "authentication failure",
            "invalid credentials",
            "failed password",
        ),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"repeated|multiple|brute|consecutive", _I),
                severity=SeverityLevel.CRITICAL,
                reason="Repeated login failures indicate a potential brute-force attack",
            ),
            SeverityModifier(
                condition=re.compile(r"root|admin|administrator", _I),
                severity=SeverityLevel.HIGH,
                reason="Failed login attempt on a privileged account",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "A user authentication attempt failed. The supplied credentials were rejected "
                "by the system."
            ),
            root_cause=(
                "The provided username or password does not match any valid account in the system."
            ),
            possible_causes=(
                "Incorrect password entered by the user",
                "Account does not exist in the system",
                "Account is locked, disabled, or expired",
                "Brute-force attack if failures are repeated from the same or multiple IPs",
                "Password policy change requiring updated credentials",
                "LDAP/SSO backend is unreachable",
            ),
            recommended_fixes=(
                "Check if the user account exists and is active",
                "Review login failure frequency for brute-force indicators",
                "Implement account lockout after N failed attempts",
                "Enable Multi-Factor Authentication (MFA) for sensitive accounts",
                "Check authentication backend (LDAP, database, SSO) connectivity",
                "Implement rate limiting on login endpoints",
            ),
        ),
    ),
    PatternRule(
        id="AUTH_TOKEN_EXPIRED",
        name="JWT/Session Token Expired",
        category=LogCategory.AUTHENTICATION,
        matchers=(
            re.compile(r"token.*expired", _I),
            re.compile(r"jwt.*expired", _I),
            re.compile(r"session.*expired", _I),
            re.compile(r"TokenExpiredError", _I),
            re.compile(r"invalid.*token", _I),
            re.compile(r"token.*invalid", _I),
        ),
        keywords=("token expired", "JWT", "session expired", "TokenExpiredError"),
        error_codes=("TokenExpiredError",),
        severity=SeverityLevel.LOW,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"service[\s-]to[\s-]service|machine|internal", _I),
                severity=SeverityLevel.HIGH,
                reason="Service-to-service token expiration can cause cascading failures",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "An authentication token (JWT or session) has expired and is no longer valid. "
                "The client must re-authenticate to obtain a new token."
            ),
            root_cause=(
                "The token's expiration time (exp claim) has passed, invalidating the session."
            ),
            possible_causes=(
                "Token TTL is too short for the use case",
                "Client is not refreshing tokens before expiry",
                "Clock skew between servers causing premature expiration",
                "User session deliberately timed out for security",
                "Refresh token is also expired (no valid way to renew)",
            ),
            recommended_fixes=(
                "Implement token refresh logic in the client application",
                "Adjust token TTL to match the expected session duration",
                "Synchronize server clocks using NTP",
                "Implement sliding window sessions for active users",
                'Return clear 401 responses with a "token_expired" error code',
            ),
        ),
    ),
    PatternRule(
        id="AUTH_PERMISSION_DENIED",
        name="Permission/Authorization Denied",
        category=LogCategory.AUTHORIZATION,
        matchers=(
            re.compile(r"permission\s+denied", _I),
            re.compile(r"access\s+denied", _I),
            re.compile(r"forbidden", _I),
            re.compile(r"not\s+authorized", _I),
            re.compile(r"insufficient\s+(?:privileges|permissions)", _I),
            re.compile(r"EACCES", _I),
            re.compile(r"HTTP\s+403", _I),
            re.compile(r"403\s+Forbidden", _I),
        ),
        keywords=("permission denied", "access denied", "forbidden", "403", "EACCES"),
        error_codes=("EACCES", "403"),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"admin|root|system|superuser", _I),
                severity=SeverityLevel.HIGH,
                reason="Permission denial on privileged resources is security-relevant",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "An operation was blocked because the user or process lacks the required "
                "permissions. The authentication succeeded, but authorization failed."
            ),
            root_cause=(
                "The authenticated identity does not have the necessary role or permission to "
                "access the requested resource."
            ),
            possible_causes=(
                "User role does not include the required permission",
                "Resource-level access control (ACL) blocking the request",
                "File system permissions preventing read/write/execute",
                "API endpoint requires elevated privileges",
                "RBAC policy recently changed, revoking access",
                "Service account missing required IAM/role bindings",
            ),
            recommended_fixes=(
                "Verify the user's role and permissions in the access control system",
                "Grant the necessary permission via RBAC/IAM if appropriate",
                "Check file ownership and permissions: ls -la / icacls",
                "Review recent permission or role policy changes",
                "Use the principle of least privilege: grant only what is needed",
                "Audit authorization failures for potential security incidents",
            ),
        ),
    ),
    PatternRule(
        id="AUTH_BRUTE_FORCE",
        name="Brute Force Attack Detected",
        category=LogCategory.SECURITY,
        matchers=(
            re.compile(r"brute[\s-]?force", _I),
            re.compile(r"too\s+many\s+(?:failed\s+)?(?:login|auth)\s+attempts", _I),
            re.compile(r"account\s+locked.*(?:failed|attempts)", _I),
            re.compile(r"rate\s+limit.*(?:auth|login)", _I),
            re.compile(r"multiple\s+failed\s+login", _I),
        ),
        keywords=("brute force", "account locked", "too many attempts", "failed login attempts"),
        severity=SeverityLevel.CRITICAL,
        explanation=ExplanationTemplate(
            summary=(
                "Multiple rapid, failed login attempts were detected, indicating a potential "
                "brute-force attack against user accounts."
            ),
            root_cause=(
                "An automated system or attacker is systematically guessing credentials to gain "
                "unauthorized access."
            ),
            possible_causes=(
                "Active brute-force attack from a malicious actor",
                "Credential stuffing using leaked password databases",
                "Misconfigured automated system retrying with wrong credentials",
                "Password spray attack across multiple accounts",
                "Bot traffic targeting the login endpoint",
            ),
            recommended_fixes=(
                "Block the offending IP addresses immediately",
                "Enable account lockout after 5 failed attempts",
                "Implement CAPTCHA on the login page after 3 failures",
                "Deploy Web Application Firewall (WAF) rules",
                "Enable Multi-Factor Authentication (MFA) organization-wide",
                "Monitor and alert on abnormal login failure rates",
                "Review access logs for additional indicators of compromise",
            ),
        ),
    ),
)
