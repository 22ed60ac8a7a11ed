"""Message broker and event streaming rules."""

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

MESSAGING_PATTERNS: tuple[PatternRule, ...] = (
    PatternRule(
        id="MQ_CONNECTION_LOST",
        name="Message Broker Connection Lost",
        category=LogCategory.MESSAGING,
        matchers=(
            re.compile(r"(?:rabbit|amqp|kafka|redis|nats).*connection.*(?:lost|closed|refused|fail)", _I),
            re.compile(r"broker.*(?:disconnected|unreachable|down)", _I),
            re.compile(r"AMQP.*(?:error|connection|closed)", _I),
            re.compile(r"KafkaJSConnectionError", _I),
            re.compile(r"lost\s+connection\s+to\s+(?:broker|queue|message)", _I),
        ),
        keywords=("RabbitMQ", "Kafka", "AMQP", "broker", "connection lost", "message queue"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "The application lost its connection to the message broker (RabbitMQ, Kafka, "
                "Redis, NATS). Messages cannot be published or consumed until the connection "
                "is restored."
            ),
            root_cause=(
                "The message broker is unreachable: it may be down, overloaded, or a network "
                "issue is preventing communication."
            ),
            possible_causes=(
                "Message broker process crashed or was restarted",
                "Network connectivity issue between the application and the broker",
                "Broker maximum connection limit reached",
                "Firewall rule blocking the broker port",
                "Broker authentication credentials changed",
                "DNS resolution failure for the broker hostname",
            ),
            recommended_fixes=(
                "Check broker status and health",
                "Verify network connectivity to the broker on the correct port",
                "Implement automatic reconnection with exponential backoff",
                "Check broker logs for resource exhaustion or crash reasons",
                "Ensure broker credentials and connection string are correct",
                "Set up broker clustering/HA for high availability",
            ),
        ),
    ),
    PatternRule(
        id="MQ_CONSUMER_LAG",
        name="Message Consumer Lag",
        category=LogCategory.MESSAGING,
        matchers=(
            re.compile(r"consumer\s+(?:lag|behind|falling\s+behind)", _I),
            re.compile(r"message.*backlog", _I),
            re.compile(r"queue\s+(?:depth|size).*(?:high|growing|exceeded)", _I),
            re.compile(r"offset.*lag", _I),
            re.compile(r"unacked.*(?:messages|count).*(?:high|growing)", _I),
        ),
        keywords=("consumer lag", "backlog", "queue depth", "offset lag", "unacked messages"),
        severity=SeverityLevel.MEDIUM,
        severity_modifiers=(
            SeverityModifier(
                condition=re.compile(r"critical|emergency|very\s+high", _I),
                severity=SeverityLevel.HIGH,
                reason="Extreme consumer lag can cause data loss if messages expire",
            ),
        ),
        explanation=ExplanationTemplate(
            summary=(
                "Message consumers are falling behind producers: messages are accumulating "
                "faster than they are being processed."
            ),
            root_cause="Consumer processing speed is slower than the message production rate.",
            possible_causes=(
                "Consumer application is processing messages too slowly",
                "Not enough consumer instances to handle the load",
                "Consumer is blocked by a slow downstream dependency",
                "Network bandwidth limiting message throughput",
                "Poison message causing repeated processing failures",
                "Consumer group rebalancing frequently, causing pauses",
            ),
            recommended_fixes=(
                "Scale up consumer instances or increase parallelism",
                "Optimize consumer processing logic (batch processing, async I/O)",
                "Implement dead letter queues for poison messages",
                "Increase consumer prefetch/batch size for throughput",
                "Monitor consumer lag with alerting: kafka-consumer-groups --describe",
                "Consider partitioning strategy for better parallelism",
            ),
        ),
    ),
    PatternRule(
        id="MQ_DEAD_LETTER",
        name="Dead Letter Queue Message",
        category=LogCategory.MESSAGING,
        matchers=(
            re.compile(r"dead[.\s-]?letter", _I),
            re.compile(r"DLQ", _I),
            re.compile(r"message.*(?:rejected|failed|undeliverable)", _I),
            re.compile(r"max\s+retries?\s+exceeded", _I),
            re.compile(r"message.*poison", _I),
        ),
        keywords=("dead letter", "DLQ", "rejected", "max retries", "poison message", "undeliverable"),
        severity=SeverityLevel.MEDIUM,
        explanation=ExplanationTemplate(
            summary=(
                "A message was moved to the dead letter queue (DLQ) after exhausting all retry "
                "attempts. The message could not be processed successfully."
            ),
            root_cause=(
                "The consumer failed to process the message after the maximum number of retries."
            ),
            possible_causes=(
                "Message format is invalid or schema has changed",
                "Processing logic throws an unhandled exception for this message",
                "Downstream service required for processing is unavailable",
                "Message payload exceeds size limits",
                "Serialization/deserialization error (incompatible data types)",
            ),
            recommended_fixes=(
                "Inspect DLQ messages: identify the common failure pattern",
                "Fix the consumer code to handle the failing message type",
                "Implement schema validation on message ingestion",
                "Set up DLQ monitoring and alerting",
                "Create a DLQ replay mechanism for reprocessing fixed messages",
                "Add structured error logging to capture why each message fails",
            ),
        ),
    ),
    PatternRule(
        id="MQ_PUBLISH_FAIL",
        name="Message Publish Failed",
        category=LogCategory.MESSAGING,
        matchers=(
            re.compile(r"(?:publish|produce|send).*(?:fail|error|timeout).*(?:message|queue|topic)", _I),
            re.compile(r"message.*(?:not\s+)?(?:publish|deliver|sent)", _I),
            re.compile(r"KafkaJSNumberOfRetriesExceeded", _I),
            re.compile(r"channel\s+closed", _I),
            re.compile(r"exchange.*not\s+found", _I),
        ),
        keywords=("publish failed", "produce error", "message delivery", "channel closed"),
        severity=SeverityLevel.HIGH,
        explanation=ExplanationTemplate(
            summary=(
                "The application failed to publish a message to the message broker. The "
                "message was not delivered and may be lost."
            ),
            root_cause=(
                "The publish operation to the message broker failed due to connectivity, "
                "configuration, or broker issues."
            ),
            possible_causes=(
                "Broker connection is down (see MQ_CONNECTION_LOST)",
                "Topic or exchange does not exist",
                "Publisher confirmation timed out",
                "Message exceeds the broker maximum message size",
                "Broker disk is full, rejecting new messages",
                "Incorrect routing key or topic name",
            ),
            recommended_fixes=(
                "Verify broker connectivity and topic/exchange existence",
                "Implement publisher confirms/acknowledgments",
                "Add a local fallback queue for messages that fail to publish",
                "Check broker disk usage and increase storage if needed",
                "Validate message size before publishing",
                "Use transactions or idempotent producers to prevent message loss",
            ),
        ),
    ),
)
