"""Ack reply-subject metadata parsing.

JetStream delivers every pull-consumer message with a reply subject that
doubles as its delivery metadata:

    $JS.ACK.<stream>.<consumer>.<delivered>.<sseq>.<cseq>.<ts>.<pending>
    $JS.ACK.<domain>.<acc_hash>.<stream>.<consumer>.<delivered>.<sseq>.<cseq>.<ts>.<pending>.<random>

The first form is the legacy layout of older servers. It is normalized to
the second by inserting empty domain and account-hash tokens, so both
layouts share the same token positions.
"""

from .exceptions import NotJSMessageError
from .patterns import ACK_PREFIX, TOKEN_SEPARATOR
from .value_objects import ConsumerMetadata, SequencePair

LEGACY_TOKEN_COUNT = 9
FULL_TOKEN_COUNT = 12
NO_DOMAIN_TOKEN = "_"

_DOMAIN = 2
_ACC_HASH = 3
_STREAM = 4
_CONSUMER = 5
_NUM_DELIVERED = 6
_STREAM_SEQ = 7
_CONSUMER_SEQ = 8
_TIMESTAMP = 9
_NUM_PENDING = 10


def ack_tokens(reply: str | None) -> list[str]:
    """Split and normalize an ack reply subject.

    Raises:
        NotJSMessageError: If the subject is not a JetStream ack subject.
    """
    if not reply:
        raise NotJSMessageError(reply)

    tokens = reply.split(TOKEN_SEPARATOR)
    count = len(tokens)
    if count < LEGACY_TOKEN_COUNT or LEGACY_TOKEN_COUNT < count < FULL_TOKEN_COUNT:
        raise NotJSMessageError(reply)
    if tuple(tokens[:2]) != ACK_PREFIX:
        raise NotJSMessageError(reply)

    if count == LEGACY_TOKEN_COUNT:
        tokens[_DOMAIN:_DOMAIN] = ["", ""]
    elif tokens[_DOMAIN] == NO_DOMAIN_TOKEN:
        tokens[_DOMAIN] = ""
    return tokens


def parse_metadata(reply: str | None) -> ConsumerMetadata:
    """Parse the delivery metadata out of an ack reply subject.

    Raises:
        NotJSMessageError: If the subject has the wrong prefix, the wrong
            number of tokens, or a non-numeric counter.
    """
    tokens = ack_tokens(reply)
    try:
        return ConsumerMetadata(
            stream=tokens[_STREAM],
            consumer=tokens[_CONSUMER],
            domain=tokens[_DOMAIN],
            sequence=SequencePair(
                stream=int(tokens[_STREAM_SEQ]),
                consumer=int(tokens[_CONSUMER_SEQ]),
            ),
            num_delivered=int(tokens[_NUM_DELIVERED]),
            num_pending=int(tokens[_NUM_PENDING]),
            timestamp_ns=int(tokens[_TIMESTAMP]),
        )
    except ValueError as e:
        raise NotJSMessageError(reply) from e
