"""Full-text search over document sections."""

import logging
import re
import time
from typing import List, Optional

from sqlalchemy import func, literal, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docchat.config import settings
from docchat.core.exceptions import SearchError
from docchat.models.document import Document, DocumentSection
from docchat.schemas.chat import Source
from docchat.services.metrics import retrieval_duration_seconds

logger = logging.getLogger(__name__)

_TERM_PATTERN = re.compile(r"\w+", re.UNICODE)


class SearchService:
    """
    Retrieval collaborator: ranks document sections against a query.

    On PostgreSQL this uses ``to_tsvector``/``plainto_tsquery`` ranked by
    ``ts_rank``. Other backends (SQLite in tests) fall back to
    case-insensitive term matching scored by the fraction of query terms a
    section contains.
    """

    def __init__(self, db: AsyncSession, text_config: Optional[str] = None) -> None:
        """
        Initialize search service.

        Args:
            db: Database session
            text_config: PostgreSQL text search configuration
        """
        self.db = db
        self.text_config = text_config or settings.SEARCH_TEXT_CONFIG
        self.logger = logger

    async def search_sections(
        self, query: str, limit: int = settings.SEARCH_RESULT_LIMIT
    ) -> List[Source]:
        """
        Search document sections.

        Args:
            query: Search query text
            limit: Maximum number of results

        Returns:
            Sources ordered by descending relevance (may be empty)

        Raises:
            SearchError: If the database query fails
        """
        if not query or not query.strip() or limit < 1:
            return []

        start = time.time()
        try:
            if self.db.get_bind().dialect.name == "postgresql":
                sources = await self._search_postgres(query, limit)
            else:
                sources = await self._search_terms(query, limit)
        except SQLAlchemyError as e:
            self.logger.error(f"Section search failed: {e}")
            raise SearchError(f"Search failed: {e}") from e
        finally:
            retrieval_duration_seconds.observe(time.time() - start)

        self.logger.info(f"Search '{query}' returned {len(sources)} sections")
        return sources

    async def _search_postgres(self, query: str, limit: int) -> List[Source]:
        """Ranked full-text search using PostgreSQL text search."""
        ts_query = func.plainto_tsquery(self.text_config, query)
        vector = func.to_tsvector(
            self.text_config,
            func.coalesce(DocumentSection.section_title, literal(""))
            + literal(" ")
            + DocumentSection.content,
        )
        rank = func.ts_rank(vector, ts_query).label("rank")

        stmt = (
            select(DocumentSection, Document, rank)
            .join(Document, DocumentSection.document_id == Document.id)
            .where(vector.op("@@")(ts_query))
            .order_by(rank.desc(), DocumentSection.section_order)
            .limit(limit)
        )
        result = await self.db.execute(stmt)

        return [
            self._to_source(section, document, float(score))
            for section, document, score in result.all()
        ]

    async def _search_terms(self, query: str, limit: int) -> List[Source]:
        """Portable fallback: match any query term, score by term coverage."""
        terms = sorted({term.lower() for term in _TERM_PATTERN.findall(query)})
        if not terms:
            return []

        haystack = func.lower(
            func.coalesce(DocumentSection.section_title, literal(""))
            + literal(" ")
            + DocumentSection.content
        )
        stmt = (
            select(DocumentSection, Document)
            .join(Document, DocumentSection.document_id == Document.id)
            .where(or_(*[haystack.contains(term, autoescape=True) for term in terms]))
            .order_by(Document.title, DocumentSection.section_order)
        )
        result = await self.db.execute(stmt)

        scored = []
        for section, document in result.all():
            text = f"{section.section_title or ''} {section.content}".lower()
            matched = sum(1 for term in terms if term in text)
            scored.append((matched / len(terms), section, document))

        # Stable sort keeps document/section order between equal scores
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            self._to_source(section, document, score)
            for score, section, document in scored[:limit]
        ]

    @staticmethod
    def _to_source(
        section: DocumentSection, document: Document, score: float
    ) -> Source:
        return Source(
            section_id=str(section.id),
            document_id=str(document.id),
            document_title=document.title,
            section_title=section.section_title or "",
            doc_type=document.doc_type,
            content=section.content,
            relevance_score=score,
        )
