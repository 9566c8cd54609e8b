"""Deterministic message classification for the greeting fast path."""

import re
from enum import Enum

# Trimmed messages must be strictly shorter than this to count as greetings
GREETING_MAX_LENGTH = 20

GREETING_PATTERNS = (
    re.compile(
        r"^(halo|hai|hi|hello|hey|selamat\s+(pagi|siang|sore|malam))[!.,\s]*$",
        re.IGNORECASE,
    ),
    re.compile(r"^(apa kabar|gimana kabar|how are you)[?!.,\s]*$", re.IGNORECASE),
    re.compile(r"^(terima kasih|makasih|thanks|thank you)[!.,\s]*$", re.IGNORECASE),
    re.compile(r"^(ok|oke|okay|baik|siap)[!.,\s]*$", re.IGNORECASE),
)


class MessageRoute(str, Enum):
    """Where an inbound message is handled."""

    GREETING = "greeting"
    KNOWLEDGE = "knowledge"


def is_greeting(text: str) -> bool:
    """Short salutation or acknowledgement matching a fixed pattern."""
    trimmed = (text or "").strip()
    return len(trimmed) < GREETING_MAX_LENGTH and any(
        pattern.match(trimmed) for pattern in GREETING_PATTERNS
    )


def classify_message(text: str) -> MessageRoute:
    """
    Pick the route for a message. Pure and total: never raises.

    Args:
        text: Raw user message

    Returns:
        ``GREETING`` for short salutations, ``KNOWLEDGE`` otherwise
    """
    return MessageRoute.GREETING if is_greeting(text) else MessageRoute.KNOWLEDGE
