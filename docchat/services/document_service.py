"""Full document lookups for the agent tools."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.models.document import Document, DocumentSection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SectionContent:
    """One section of a full document."""

    section_title: str
    content: str
    section_order: int


@dataclass(frozen=True)
class FullDocument:
    """A document with all of its sections in reading order."""

    title: str
    doc_type: str
    sections: List[SectionContent] = field(default_factory=list)

    def render(self) -> str:
        """Markdown-ish rendering: one ``## title`` heading per section."""
        return "\n\n".join(
            f"## {section.section_title}\n{section.content}"
            for section in self.sections
        )


class DocumentService:
    """Read access to documents and their sections."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize document service.

        Args:
            db: Database session
        """
        self.db = db
        self.logger = logger

    async def get_document_full(self, document_id: str) -> Optional[FullDocument]:
        """
        Fetch a document with every section sorted by ``section_order``.

        Args:
            document_id: Document UUID as a string

        Returns:
            FullDocument, or None if the id is malformed or unknown
        """
        try:
            doc_uuid = UUID(str(document_id))
        except ValueError:
            self.logger.info(f"Rejected malformed document id: {document_id!r}")
            return None

        document = await self.db.scalar(select(Document).where(Document.id == doc_uuid))
        if document is None:
            return None

        result = await self.db.execute(
            select(DocumentSection)
            .where(DocumentSection.document_id == doc_uuid)
            .order_by(DocumentSection.section_order)
        )
        sections = [
            SectionContent(
                section_title=section.section_title or "",
                content=section.content,
                section_order=section.section_order,
            )
            for section in result.scalars().all()
        ]

        return FullDocument(title=document.title, doc_type=document.doc_type, sections=sections)
