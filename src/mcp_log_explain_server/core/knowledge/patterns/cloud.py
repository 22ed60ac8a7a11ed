"""Cloud provider rules (AWS, GCP, Azure)."""

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

CLOUD_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="CLOUD_LAMBDA_TIMEOUT",
        name="Lambda/Cloud Function Timeout",
        category=LogCategory.CLOUD,
        matchers=(
            re.compile(r"Task\s+timed\s+out\s+after\s+\d+.*seconds", _I),
            re.compile(r"Lambda.*timeout", _I),
            re.compile(r"FUNCTION_INVOCATION_TIMEOUT", _I),
            re.compile(
                r"Function\s+execution\s+took\s+\d+\s+ms.*finished\s+with\s+status.*timeout", _I
            ),
            re.compile(r"cloud\s*function.*timed?\s*out", _I),
        ),
        keywords=("Lambda", "timeout", "cloud function", "function invocation", "serverless"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A serverless function (AWS Lambda, GCP Cloud Function, Azure Function) exceeded "
                "its maximum execution time and was terminated."
            ),
            root_cause="The function did not complete within the configured timeout limit.",
            possible_causes=(
                "Function timeout configured too low for the workload",
                "Slow external API call or database query blocking execution",
                "Cold start adding significant latency",
                "Infinite loop or recursive call in the function code",
                "Large payload processing exceeding time limits",
                "VPC-attached Lambda with slow ENI provisioning",
            ),
            recommended_fixes=(
                "Increase the function timeout setting (max 15 min for Lambda)",
                "Optimize the function code to complete faster",
                "Move long-running work to a queue + worker pattern (SQS, Cloud Tasks)",
                "Use provisioned concurrency to eliminate cold starts",
                "Add connection pooling for database connections",
                "Break large tasks into smaller, chained function invocations",
            ),
        ),
    ),
    PatternRule(
        id="CLOUD_LAMBDA_MEMORY",
        name="Lambda/Function Out of Memory",
        category=LogCategory.CLOUD,
        matchers=(
            re.compile(r"Runtime\.ExitError", _I),
            re.compile(r"RequestId.*Process\s+exited\s+before\s+completing", _I),
            re.compile(r"FUNCTION_INVOCATION_FAILED", _I),
            re.compile(r"memory\s+size.*exceeded", _I),
            re.compile(r"Runtime\.OutOfMemory", _I),
        ),
        keywords=("Lambda", "out of memory", "function invocation failed", "Runtime.ExitError"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "A serverless function ran out of memory and was terminated. The function was "
                "allocated insufficient memory for its workload."
            ),
            root_cause=(
                "The function consumed more memory than its configured memory allocation allows."
            ),
            possible_causes=(
                "Memory allocation set too low for the workload",
                "Large file or data processing consuming excessive memory",
                "Memory leak across warm invocations",
                "Loading too many dependencies at cold start",
                "Buffer overflow from large HTTP response bodies",
            ),
            recommended_fixes=(
                "Increase the function memory allocation",
                "Stream large files instead of loading them entirely into memory",
                "Profile memory usage with AWS Lambda Power Tuning",
                "Implement pagination for large data sets",
                "Clean up resources at the end of each invocation",
            ),
        ),
    ),
    PatternRule(
        id="CLOUD_S3_ACCESS_DENIED",
        name="S3/Storage Access Denied",
        category=LogCategory.CLOUD,
        matchers=(
            re.compile(r"AccessDenied.*(?:S3|s3|bucket)", _I),
            re.compile(r"Access\s+Denied.*(?:storage|blob|bucket|object)", _I),
            re.compile(r"NoSuchBucket", _I),
            re.compile(r"NoSuchKey", _I),
            re.compile(r"Storage.*permission.*denied", _I),
            re.compile(r"403.*(?:S3|bucket|storage)", _I),
        ),
        keywords=("S3", "AccessDenied", "bucket", "storage", "NoSuchBucket", "NoSuchKey"),
        error_codes=("AccessDenied", "NoSuchBucket", "NoSuchKey", "403"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "Access to a cloud storage resource (S3 bucket, GCS bucket, Azure Blob) was "
                "denied, or the resource does not exist."
            ),
            root_cause=(
                "The IAM identity lacks permissions to access the storage resource, or the "
                "resource name is incorrect."
            ),
            possible_causes=(
                "IAM policy does not grant s3:GetObject, s3:PutObject, etc.",
                "Bucket policy explicitly denies access",
                "Bucket name or object key is incorrect",
                "Bucket is in a different region or account",
                "VPC endpoint policy is restricting access",
                "KMS key access denied for encrypted objects",
            ),
            recommended_fixes=(
                "Check IAM permissions: aws iam simulate-principal-policy",
                "Review the bucket policy for explicit deny statements",
                "Verify the bucket name and object key are correct",
                "Ensure the role has KMS decrypt permissions for encrypted buckets",
                "Check VPC endpoint policy if accessing from within a VPC",
                "Use AWS CloudTrail to investigate the denied API call",
            ),
        ),
    ),
    PatternRule(
        id="CLOUD_THROTTLING",
        name="Cloud API Throttling",
        category=LogCategory.CLOUD,
        matchers=(
            re.compile(r"Throttling", _I),
            re.compile(r"Rate\s+exceeded", _I),
            re.compile(r"TooManyRequestsException", _I),
            re.compile(r"SlowDown", _I),
            re.compile(r"ProvisionedThroughputExceededException", _I),
            re.compile(r"ThrottlingException", _I),
            re.compile(r"API\s+rate\s+limit\s+exceeded", _I),
        ),
        keywords=(
            "throttling",
            "rate exceeded",
            "SlowDown",
            "TooManyRequests",
            "provisioned throughput",
        ),
        error_codes=("Throttling", "SlowDown", "TooManyRequestsException"),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"repeated|sustained|continuous", _I),
                severity=SeverityLevel.HIGH,
                reason="Sustained API throttling causes cascading failures and data loss",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "Cloud API requests are being throttled: the service is rejecting requests "
                "because the rate limit has been exceeded."
            ),
            root_cause=(
                "The application is sending API requests faster than the cloud provider allows "
                "for the configured service tier."
            ),
            possible_causes=(
                "Burst of requests exceeding the per-second API rate limit",
                "DynamoDB table provisioned throughput is too low",
                "S3 request rate limit per prefix exceeded (5,500 GET/s)",
                "Missing exponential backoff on API calls",
                "Parallel processing creating too many concurrent API calls",
            ),
            recommended_fixes=(
                "Implement exponential backoff with jitter on retries",
                "Request a service quota increase from the cloud provider",
                "Use batch APIs instead of individual item operations",
                "Distribute requests across multiple partitions/prefixes",
                "Enable auto-scaling for DynamoDB or increase provisioned capacity",
                "Cache frequently accessed data to reduce API call volume",
            ),
        ),
    ),
    PatternRule(
        id="CLOUD_IAM_ERROR",
        name="IAM Authentication/Authorization Error",
        category=LogCategory.CLOUD,
        matchers=(
            re.compile(r"UnauthorizedAccess", _I),
            re.compile(r"InvalidClientTokenId", _I),
            re.compile(r"SignatureDoesNotMatch", _I),
            re.compile(r"ExpiredToken", _I),
            re.compile(r"AssumeRole.*(?:fail|denied|error)", _I),
            re.compile(r"sts.*(?:error|fail|denied)", _I),
            re.compile(r"credentials.*(?:expired|invalid|not\s+found)", _I),
        ),
        keywords=("IAM", "credentials", "AssumeRole", "STS", "unauthorized", "expired token"),
        error_codes=("InvalidClientTokenId", "SignatureDoesNotMatch", "ExpiredToken"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "An AWS/cloud IAM authentication or authorization error occurred. The provided "
                "credentials are invalid, expired, or lack required permissions."
            ),
            root_cause=(
                "The cloud credentials used for the API call are invalid, expired, or have "
                "insufficient permissions."
            ),
            possible_causes=(
                "AWS access key or secret key is incorrect or rotated",
                "Temporary credentials (STS) have expired",
                "AssumeRole failed due to missing trust relationship",
                "Instance profile or service account not attached to the resource",
                "Clock skew causing signature validation failures",
                "MFA required but not provided for the API call",
            ),
            recommended_fixes=(
                "Verify credentials: aws sts get-caller-identity",
                "Rotate and update access keys if compromised",
                "Check the IAM role trust policy for AssumeRole issues",
                "Ensure the EC2 instance has an instance profile attached",
                "Synchronize system clock: sudo ntpdate ntp.ubuntu.com",
                "Use IAM roles instead of long-lived access keys",
            ),
        ),
    ),
)
