"""Document and section models backing full-text retrieval."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import relationship

from docchat.database import Base


class Document(Base):
    """An organization document (statute, guideline, minutes, ...)."""

    __tablename__ = "documents"

    id = Column(Uuid, primary_key=True, default=uuid4)
    title = Column(String(500), nullable=False)
    doc_type = Column(String(100), nullable=False, default="umum")
    source_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    sections = relationship(
        "DocumentSection",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentSection.section_order",
    )

    def __repr__(self) -> str:
        return f"<Document {self.id} '{self.title}'>"


class DocumentSection(Base):
    """A retrievable section of a document."""

    __tablename__ = "document_sections"

    id = Column(Uuid, primary_key=True, default=uuid4)
    document_id = Column(
        Uuid,
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    section_title = Column(String(500), nullable=True)
    content = Column(Text, nullable=False)
    section_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    document = relationship("Document", back_populates="sections")

    def __repr__(self) -> str:
        return f"<DocumentSection {self.id} '{self.section_title}'>"
