"""Subject pattern management for NATS messaging."""

import re

TOKEN_SEPARATOR = "."
PARTIAL_WILDCARD = "*"
FULL_WILDCARD = ">"

DEFAULT_API_PREFIX = "$JS.API"
ACK_PREFIX = ("$JS", "ACK")
INBOX_PREFIX = "_INBOX"

_STREAM_NAME_FORBIDDEN = re.compile(r"(\s|\.|>|\*)")


class SubjectPatterns:
    """Centralized subject pattern management following DDD principles."""

    # JetStream API subjects
    @staticmethod
    def api_prefix(domain: str | None = None) -> str:
        """Generate the API prefix, optionally scoped to a JetStream domain."""
        if domain:
            return f"$JS.{domain}.API"
        return DEFAULT_API_PREFIX

    @staticmethod
    def consumer_next(prefix: str, stream: str, consumer: str) -> str:
        """Subject a pull consumer receives fetch requests on."""
        return f"{prefix}.CONSUMER.MSG.NEXT.{stream}.{consumer}"

    @staticmethod
    def consumer_info(prefix: str, stream: str, consumer: str) -> str:
        """Consumer info subject."""
        return f"{prefix}.CONSUMER.INFO.{stream}.{consumer}"

    @staticmethod
    def consumer_delete(prefix: str, stream: str, consumer: str) -> str:
        """Consumer deletion subject."""
        return f"{prefix}.CONSUMER.DELETE.{stream}.{consumer}"

    @staticmethod
    def consumer_create(
        prefix: str,
        stream: str,
        name: str | None = None,
        filter_subject: str | None = None,
    ) -> str:
        """Consumer creation subject, named or ephemeral."""
        if not name:
            return f"{prefix}.CONSUMER.CREATE.{stream}"
        if filter_subject and filter_subject != FULL_WILDCARD:
            return f"{prefix}.CONSUMER.CREATE.{stream}.{name}.{filter_subject}"
        return f"{prefix}.CONSUMER.CREATE.{stream}.{name}"

    @staticmethod
    def durable_create(prefix: str, stream: str, durable: str) -> str:
        """Legacy durable consumer creation subject."""
        return f"{prefix}.CONSUMER.DURABLE.CREATE.{stream}.{durable}"

    @staticmethod
    def stream_create(prefix: str, stream: str) -> str:
        """Stream creation subject."""
        return f"{prefix}.STREAM.CREATE.{stream}"

    @staticmethod
    def stream_update(prefix: str, stream: str) -> str:
        """Stream update subject."""
        return f"{prefix}.STREAM.UPDATE.{stream}"

    @staticmethod
    def stream_info(prefix: str, stream: str) -> str:
        """Stream info subject."""
        return f"{prefix}.STREAM.INFO.{stream}"

    @staticmethod
    def stream_delete(prefix: str, stream: str) -> str:
        """Stream deletion subject."""
        return f"{prefix}.STREAM.DELETE.{stream}"

    @staticmethod
    def stream_names(prefix: str) -> str:
        """Stream name lookup subject."""
        return f"{prefix}.STREAM.NAMES"

    @staticmethod
    def stream_msg_get(prefix: str, stream: str) -> str:
        """Stored message retrieval subject."""
        return f"{prefix}.STREAM.MSG.GET.{stream}"

    @staticmethod
    def direct_get(prefix: str, stream: str, subject: str | None = None) -> str:
        """Direct get subject, optionally last-by-subject."""
        if subject:
            return f"{prefix}.DIRECT.GET.{stream}.{subject}"
        return f"{prefix}.DIRECT.GET.{stream}"

    @staticmethod
    def account_info(prefix: str) -> str:
        """Account info subject."""
        return f"{prefix}.INFO"

    @staticmethod
    def inbox(unique: str) -> str:
        """Generate an inbox subject for request/response correlation."""
        return f"{INBOX_PREFIX}.{unique}"

    # Pattern validation
    @staticmethod
    def tokenize(subject: str) -> list[str]:
        """Split a subject into its tokens."""
        return subject.split(TOKEN_SEPARATOR)

    @staticmethod
    def is_valid_pattern(pattern: str) -> bool:
        """Validate a subscription pattern.

        Valid patterns:
        - "orders.created" - literal
        - "orders.*" - single token wildcard
        - "orders.>" - trailing multi token wildcard

        Invalid patterns:
        - "" - empty string
        - "orders..created" - empty token
        - "orders.>.created" - '>' before the last token
        """
        return SubjectPatterns.pattern_error(pattern) is None

    @staticmethod
    def pattern_error(pattern: str) -> str | None:
        """Return why a pattern is invalid, or None when it is valid."""
        if not pattern:
            return "subject is empty"
        tokens = pattern.split(TOKEN_SEPARATOR)
        last = len(tokens) - 1
        for i, token in enumerate(tokens):
            if not token:
                return "empty token"
            if token == FULL_WILDCARD and i != last:
                return "'>' must be the last token"
        return None

    @staticmethod
    def is_literal(subject: str) -> bool:
        """Check that a subject has no wildcard tokens."""
        return not any(
            token in (PARTIAL_WILDCARD, FULL_WILDCARD)
            for token in subject.split(TOKEN_SEPARATOR)
        )

    @staticmethod
    def is_valid_stream_name(name: str | None) -> bool:
        """Validate a stream name: non-empty, no whitespace, '.', '>' or '*'."""
        if not name:
            return False
        return _STREAM_NAME_FORBIDDEN.search(name) is None
