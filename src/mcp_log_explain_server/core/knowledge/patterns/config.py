"""Configuration and deployment rules."""

from __future__ import annotations

import re

from ...models import ExplanationTemplate, LogCategory, PatternRule, SeverityLevel

_I = re.IGNORECASE

CONFIG_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="CFG_ENV_MISSING",
        name="Missing Environment Variable",
        category=LogCategory.CONFIGURATION,
        matchers=(
            re.compile(
                r"(?:env|environment)\s*(?:var|variable)?.*"
                r"(?:missing|not\s+set|undefined|not\s+found|required)",
                _I,
            ),
            re.compile(r"missing\s+(?:required\s+)?(?:env|environment|config)", _I),
            re.compile(r"undefined.*(?:env|environment|config|process\.env)", _I),
            re.compile(r"config.*(?:not\s+found|missing|required)", _I),
        ),
        keywords=("environment variable", "env missing", "config not found", "undefined env"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A required environment variable or configuration value is missing. The "
                "application may fail to start or behave incorrectly."
            ),
            root_cause=(
                "The deployment environment does not have a required configuration variable set."
            ),
            possible_causes=(
                ".env file not present or not loaded",
                "Environment variable not set in the deployment platform (Docker, Kubernetes, PaaS)",
                "Variable name misspelled in code or configuration",
                "Config file not included in the deployment package",
                "Environment-specific config not applied (dev vs prod)",
                "Secrets manager (Vault, AWS Secrets Manager) not accessible",
            ),
            recommended_fixes=(
                "Verify all required environment variables are set: printenv / echo $VAR",
                "Check the .env file exists and is loaded by the application",
                "Cross-reference with .env.example for required variables",
                "Set the variable in your deployment platform configuration",
                "Implement startup validation that fails fast on missing config",
                "Use a config validation library (e.g., pydantic-settings, Joi, zod) at boot time",
            ),
        ),
    ),
    PatternRule(
        id="CFG_PORT_CONFLICT",
        name="Port Configuration Conflict",
        category=LogCategory.CONFIGURATION,
        matchers=(
            re.compile(r"port.*(?:conflict|mismatch|incorrect)", _I),
            re.compile(r"listen.*(?:EACCES|EADDRINUSE)", _I),
            re.compile(r"permission\s+denied.*port", _I),
        ),
        keywords=("port conflict", "EACCES port", "port permission"),
        error_codes=("EACCES",),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "The application cannot bind to the configured port due to a conflict, "
                "permission issue, or misconfiguration."
            ),
            root_cause=(
                "The specified port is either in use, requires elevated privileges, or is "
                "misconfigured."
            ),
            possible_causes=(
                "Port below 1024 requires root/admin privileges",
                "Another process already using the port (see NET_PORT_IN_USE)",
                "Port number misconfigured in environment variables",
                "Container port mapping conflict",
            ),
            recommended_fixes=(
                "Use a port above 1024 to avoid privilege requirements",
                "Check and kill conflicting processes on the port",
                "Verify port configuration in .env and Docker Compose",
                "Grant the application CAP_NET_BIND_SERVICE capability if needed",
            ),
        ),
    ),
    PatternRule(
        id="CFG_DEPENDENCY_ERROR",
        name="Module/Dependency Not Found",
        category=LogCategory.APPLICATION,
        matchers=(
            re.compile(r"cannot\s+find\s+module", _I),
            re.compile(r"MODULE_NOT_FOUND", _I),
            re.compile(r"ModuleNotFoundError", _I),
            re.compile(r"ImportError.*No\s+module\s+named", _I),
            re.compile(r"ClassNotFoundException", _I),
            re.compile(r"require.*not\s+found", _I),
        ),
        keywords=("cannot find module", "MODULE_NOT_FOUND", "ImportError", "dependency"),
        error_codes=("MODULE_NOT_FOUND",),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "The application failed to load a required module or dependency. It cannot "
                "start or function correctly without it."
            ),
            root_cause="A required package is not installed, or the import path is incorrect.",
            possible_causes=(
                "npm install / pip install was not run after adding a dependency",
                "Package was removed from node_modules (corrupted installation)",
                "Import path or module name is misspelled",
                "Package version incompatibility",
                "Monorepo workspace linking not configured correctly",
                "Build/transpilation step skipped, missing compiled output",
            ),
            recommended_fixes=(
                "Run the package manager install: npm install / pip install -r requirements.txt",
                "Delete node_modules/vendor and reinstall: rm -rf node_modules && npm install",
                "Verify the package is listed in package.json or requirements.txt",
                "Check for typos in the import statement",
                "Ensure the build step completes before running the application",
                "Verify package version compatibility with your runtime version",
            ),
        ),
    ),
)
