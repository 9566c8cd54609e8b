"""Chat wire contract shared by every presentation layer.

Field names serialize in camelCase. Changing any of these fields is a breaking
change for the web client and the messaging adapters.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing snake_case fields as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Source(CamelModel):
    """A retrieved passage (document section) available for citation."""

    model_config = ConfigDict(frozen=True)

    section_id: str
    document_title: str
    section_title: str = ""
    doc_type: str
    content: str
    relevance_score: Optional[float] = None

    # Parent document id, used by the agent tools; not part of the wire contract
    document_id: Optional[str] = Field(default=None, exclude=True)

    @property
    def registry_key(self) -> Tuple[str, str]:
        """Identity of the logical section for de-duplication."""
        return (self.document_title, self.section_title)


class Citation(CamelModel):
    """Exact span of a display marker inside the final answer text."""

    model_config = ConfigDict(frozen=True)

    source_index: int = Field(..., ge=0, description="0-based index into sources")
    start_offset: int = Field(..., ge=0, description="Marker start (inclusive)")
    end_offset: int = Field(..., ge=0, description="Marker end (exclusive)")
    marker: str = Field(..., description='Display text, e.g. "[1]"')


class ChatResponse(CamelModel):
    """Complete result of one conversational turn."""

    answer: str
    citations: List[Citation] = Field(default_factory=list)
    sources: List[Source] = Field(default_factory=list)
    has_citations: bool = Field(
        default=False,
        description="False = fallback mode, render sources as a plain list",
    )


class ChatRequest(CamelModel):
    """Request body for the web chat endpoint."""

    message: Optional[str] = None
    conversation_id: Optional[str] = None
    user_id: Optional[str] = None
