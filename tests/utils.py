"""Test utility functions."""

import json
from typing import Any, Dict, List, Optional

from faker import Faker

from docchat.core.security import compute_line_signature
from docchat.schemas.chat import Citation, Source

fake = Faker()

TEST_CHANNEL_SECRET = "test-channel-secret"
TEST_ADMIN_TOKEN = "test-admin-token"


def make_source(
    document_title: Optional[str] = None,
    section_title: Optional[str] = None,
    content: Optional[str] = None,
    **overrides: Any,
) -> Source:
    """Build a retrieved passage with Faker defaults."""
    return Source(
        section_id=overrides.pop("section_id", fake.uuid4()),
        document_id=overrides.pop("document_id", fake.uuid4()),
        document_title=document_title or fake.catch_phrase(),
        section_title=section_title if section_title is not None else fake.bs(),
        doc_type=overrides.pop("doc_type", "pedoman"),
        content=content or fake.paragraph(),
        relevance_score=overrides.pop("relevance_score", 0.5),
    )


def make_sources(count: int) -> List[Source]:
    """Build ``count`` passages with distinct registry keys."""
    return [make_source(f"Dokumen {i}", f"Bagian {i}") for i in range(1, count + 1)]


def line_event(
    text: str = "Kapan batas pengajuan kegiatan?",
    user_id: Optional[str] = None,
    reply_token: Optional[str] = None,
    message_type: str = "text",
) -> Dict[str, Any]:
    """Build a LINE message event."""
    message: Dict[str, Any] = {"id": fake.numerify("##########"), "type": message_type}
    if message_type == "text":
        message["text"] = text
    return {
        "type": "message",
        "mode": "active",
        "timestamp": 1700000000000,
        "source": {"type": "user", "userId": user_id or f"U{fake.md5()}"},
        "replyToken": reply_token or fake.md5(),
        "message": message,
    }


def signed_line_request(
    events: List[Dict[str, Any]], secret: str = TEST_CHANNEL_SECRET
) -> Dict[str, Any]:
    """Raw webhook body and headers signed like LINE does."""
    body = json.dumps({"destination": f"U{fake.md5()}", "events": events}).encode()
    return {
        "content": body,
        "headers": {
            "Content-Type": "application/json",
            "X-Line-Signature": compute_line_signature(body, secret),
        },
    }


def assert_valid_response(response: Any, expected_status: int = 200) -> None:
    """Assert response is valid with expected status."""
    assert response.status_code == expected_status, (
        f"Expected status {expected_status}, got {response.status_code}. "
        f"Response: {response.text}"
    )


def assert_offsets_exact(answer: str, citations: List[Citation]) -> None:
    """Every citation span must slice out exactly its marker."""
    for citation in citations:
        assert answer[citation.start_offset : citation.end_offset] == citation.marker


def assert_offsets_exact_json(data: Dict[str, Any]) -> None:
    """Same check over a camelCase ChatResponse payload."""
    for citation in data["citations"]:
        span = data["answer"][citation["startOffset"] : citation["endOffset"]]
        assert span == citation["marker"]
