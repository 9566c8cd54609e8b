"""Tagged result variants returned by the agent tools."""

from typing import List, Literal, Optional, Sequence, Union

from pydantic import BaseModel

from docchat.schemas.chat import CamelModel, Source


class SectionHit(CamelModel):
    """A search hit as shown to the model."""

    index: Optional[int] = None  # registry number, filled in after merging
    document_id: Optional[str] = None
    document_title: str
    section_title: str
    content: str

    @classmethod
    def from_source(cls, source: Source) -> "SectionHit":
        return cls(
            document_id=source.document_id,
            document_title=source.document_title,
            section_title=source.section_title,
            content=source.content,
        )


class SearchFound(BaseModel):
    """Search returned at least one section."""

    found: Literal[True] = True
    sections: List[SectionHit]

    def with_indices(self, numbers: Sequence[int]) -> "SearchFound":
        """Copy with each section labelled by its registry number."""
        sections = [
            hit.model_copy(update={"index": number})
            for hit, number in zip(self.sections, numbers)
        ]
        return SearchFound(sections=sections)


class SearchNotFound(BaseModel):
    """Search returned nothing."""

    found: Literal[False] = False
    message: str


class DocumentFound(BaseModel):
    """Full document content."""

    found: Literal[True] = True
    title: str
    type: str
    content: str


class DocumentNotFound(BaseModel):
    """Requested document does not exist."""

    found: Literal[False] = False
    message: str


SearchResult = Union[SearchFound, SearchNotFound]
DocumentResult = Union[DocumentFound, DocumentNotFound]
ToolResult = Union[SearchFound, SearchNotFound, DocumentFound, DocumentNotFound]
