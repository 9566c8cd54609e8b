"""Greeting fast path: canned replies, no retrieval and no LLM call."""

import random
from typing import Optional

from docchat.config import settings
from docchat.schemas.chat import ChatResponse

GREETING_RESPONSES = (
    f"Halo! 👋 Saya asisten pengetahuan {settings.ORGANIZATION_NAME}. Silakan "
    "tanyakan apa saja tentang organisasi, prosedur kegiatan, atau keanggotaan.",
    f"Hai! Saya siap membantu menjawab pertanyaan seputar {settings.ORGANIZATION_NAME}. "
    "Ada yang ingin Anda tanyakan?",
    f"Selamat datang! 🎓 Saya asisten pengetahuan {settings.ORGANIZATION_NAME}. "
    "Apa yang bisa saya bantu hari ini?",
)


def handle_greeting(text: str, rng: Optional[random.Random] = None) -> ChatResponse:
    """
    Answer a salutation with one of the fixed greeting responses.

    Args:
        text: The user's message (unused, every greeting gets a generic reply)
        rng: Random source, injectable for deterministic tests

    Returns:
        ChatResponse without citations or sources
    """
    chooser = rng or random
    return ChatResponse(answer=chooser.choice(GREETING_RESPONSES))
