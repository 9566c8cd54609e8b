"""Tools exposed to the document agent and their executor."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from docchat.config import settings
from docchat.core.exceptions import ToolExecutionError
from docchat.schemas.tools import (
    DocumentFound,
    DocumentNotFound,
    SearchFound,
    SearchNotFound,
    SectionHit,
    ToolResult,
)
from docchat.services.citations import SourceAccumulator
from docchat.services.document_service import DocumentService
from docchat.services.metrics import agent_tool_calls_total
from docchat.services.search_service import SearchService

logger = logging.getLogger(__name__)

SEARCH_DOCUMENTS = "searchDocuments"
GET_DOCUMENT_FULL = "getDocumentFull"
KNOWN_TOOLS = frozenset({SEARCH_DOCUMENTS, GET_DOCUMENT_FULL})
UNKNOWN_TOOL_LABEL = "unknown"

SEARCH_NOT_FOUND_MESSAGE = "Tidak ditemukan dokumen yang relevan."
DOCUMENT_NOT_FOUND_MESSAGE = "Dokumen tidak ditemukan."

TOOL_DEFINITIONS: List[Dict[str, Any]] = [
    {
        "type": "function",
        "function": {
            "name": SEARCH_DOCUMENTS,
            "description": (
                f"Cari bagian-bagian dokumen {settings.ORGANIZATION_NAME} yang relevan "
                "dengan query. Mengembalikan judul dokumen, judul bagian, isi, dan "
                "nomor index untuk kutipan [src:N]."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "query": {
                        "type": "string",
                        "description": "Query pencarian dalam bahasa Indonesia",
                    }
                },
                "required": ["query"],
            },
        },
    },
    {
        "type": "function",
        "function": {
            "name": GET_DOCUMENT_FULL,
            "description": (
                "Ambil isi lengkap satu dokumen berdasarkan ID-nya. Document ID "
                "didapat dari hasil searchDocuments."
            ),
            "parameters": {
                "type": "object",
                "properties": {
                    "documentId": {
                        "type": "string",
                        "description": "UUID dari dokumen yang ingin diambil",
                    }
                },
                "required": ["documentId"],
            },
        },
    },
]


@dataclass
class ToolExecution:
    """Result of one tool call plus the passages it surfaced."""

    name: str
    result: ToolResult
    collected: SourceAccumulator = field(default_factory=SourceAccumulator)


def parse_arguments(raw: Union[str, Dict[str, Any], None]) -> Dict[str, Any]:
    """
    Normalize tool call arguments to a dict.

    Raises:
        ToolExecutionError: If the arguments are not a JSON object
    """
    if raw is None:
        return {}
    if isinstance(raw, dict):
        return raw
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ToolExecutionError(f"Invalid tool arguments: {raw!r}") from e
    if not isinstance(parsed, dict):
        raise ToolExecutionError(f"Tool arguments must be an object: {raw!r}")
    return parsed


def _require_string(arguments: Dict[str, Any], name: str) -> str:
    value = arguments.get(name)
    if not isinstance(value, str) or not value.strip():
        raise ToolExecutionError(f"Missing string argument '{name}'")
    return value.strip()


class DocumentTools:
    """
    Executes agent tool calls against the retrieval collaborators.

    Each execution gets its own ``SourceAccumulator``; the agent merges it into
    the turn's registry once the call returns.
    """

    def __init__(
        self,
        search_service: SearchService,
        document_service: DocumentService,
        search_limit: int = settings.SEARCH_RESULT_LIMIT,
    ) -> None:
        self.search_service = search_service
        self.document_service = document_service
        self.search_limit = search_limit
        self.logger = logger

    @property
    def definitions(self) -> List[Dict[str, Any]]:
        return TOOL_DEFINITIONS

    async def execute(
        self, name: str, raw_arguments: Union[str, Dict[str, Any], None]
    ) -> ToolExecution:
        """
        Run one tool call.

        Unknown tools and invalid arguments come back as not-found results
        so the model can recover. Retrieval transport failures propagate.

        Args:
            name: Tool name requested by the model
            raw_arguments: Arguments as sent by the model

        Returns:
            ToolExecution with the tagged result and collected passages
        """
        # Model-supplied names must not create new series
        label = name if name in KNOWN_TOOLS else UNKNOWN_TOOL_LABEL
        agent_tool_calls_total.labels(tool=label).inc()

        try:
            arguments = parse_arguments(raw_arguments)
            if name == SEARCH_DOCUMENTS:
                return await self.search_documents(_require_string(arguments, "query"))
            if name == GET_DOCUMENT_FULL:
                return await self.get_document_full(
                    _require_string(arguments, "documentId")
                )
            raise ToolExecutionError(f"Unknown tool: {name}")

        except ToolExecutionError as e:
            self.logger.warning(f"Tool call rejected: {e}")
            if name == GET_DOCUMENT_FULL:
                return ToolExecution(name, DocumentNotFound(message=str(e)))
            return ToolExecution(name, SearchNotFound(message=str(e)))

    async def search_documents(self, query: str) -> ToolExecution:
        """Search sections; every hit is collected for the registry."""
        results = await self.search_service.search_sections(query, self.search_limit)
        if not results:
            return ToolExecution(
                SEARCH_DOCUMENTS, SearchNotFound(message=SEARCH_NOT_FOUND_MESSAGE)
            )

        collected = SourceAccumulator()
        collected.extend(results)
        result = SearchFound(sections=[SectionHit.from_source(r) for r in results])

        self.logger.info(f"searchDocuments('{query}') -> {len(results)} sections")
        return ToolExecution(SEARCH_DOCUMENTS, result, collected)

    async def get_document_full(self, document_id: str) -> ToolExecution:
        """Fetch a whole document; nothing is collected for citation."""
        document = await self.document_service.get_document_full(document_id)
        if document is None:
            return ToolExecution(
                GET_DOCUMENT_FULL, DocumentNotFound(message=DOCUMENT_NOT_FOUND_MESSAGE)
            )

        return ToolExecution(
            GET_DOCUMENT_FULL,
            DocumentFound(
                title=document.title, type=document.doc_type, content=document.render()
            ),
        )
