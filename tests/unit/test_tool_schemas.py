"""Unit tests for agent tool result variants and argument parsing."""

import json

import pytest

from docchat.core.exceptions import ToolExecutionError
from docchat.schemas.tools import (
    DocumentFound,
    DocumentNotFound,
    SearchFound,
    SearchNotFound,
    SectionHit,
)
from docchat.services.agent.tools import TOOL_DEFINITIONS, parse_arguments
from tests.utils import make_source


@pytest.mark.unit
class TestToolResults:
    """Test tagged result variants."""

    def test_search_found_with_indices(self):
        """Registry numbers are attached without mutating the original."""
        hits = [SectionHit.from_source(make_source()) for _ in range(2)]
        found = SearchFound(sections=hits)

        numbered = found.with_indices([3, 1])

        assert [hit.index for hit in numbered.sections] == [3, 1]
        assert all(hit.index is None for hit in found.sections)

    def test_search_found_serializes_for_the_model(self):
        """Tool output uses camelCase and carries the document id."""
        source = make_source("AD/ART", "Keanggotaan", content="isi", document_id="doc-1")
        found = SearchFound(sections=[SectionHit.from_source(source)]).with_indices([1])

        payload = json.loads(found.model_dump_json(by_alias=True))

        assert payload == {
            "found": True,
            "sections": [
                {
                    "index": 1,
                    "documentId": "doc-1",
                    "documentTitle": "AD/ART",
                    "sectionTitle": "Keanggotaan",
                    "content": "isi",
                }
            ],
        }

    def test_not_found_variants(self):
        """NotFound variants carry only a message."""
        assert SearchNotFound(message="x").model_dump() == {"found": False, "message": "x"}
        assert DocumentNotFound(message="y").model_dump() == {"found": False, "message": "y"}

    def test_document_found(self):
        """DocumentFound exposes title, type and content."""
        doc = DocumentFound(title="AD/ART", type="anggaran dasar", content="## A\nisi")

        assert doc.found is True
        assert doc.model_dump()["type"] == "anggaran dasar"


@pytest.mark.unit
class TestToolArguments:
    """Test tool call argument normalization."""

    def test_dict_passes_through(self):
        assert parse_arguments({"query": "kegiatan"}) == {"query": "kegiatan"}

    def test_json_string_is_decoded(self):
        assert parse_arguments('{"documentId": "abc"}') == {"documentId": "abc"}

    def test_missing_arguments(self):
        assert parse_arguments(None) == {}

    @pytest.mark.parametrize("raw", ["not json", "[1, 2]", '"query"'])
    def test_invalid_arguments_raise(self, raw):
        with pytest.raises(ToolExecutionError):
            parse_arguments(raw)

    def test_definitions_declare_required_arguments(self):
        """Both tools are exposed with their required parameter."""
        required = {
            d["function"]["name"]: d["function"]["parameters"]["required"]
            for d in TOOL_DEFINITIONS
        }

        assert required == {"searchDocuments": ["query"], "getDocumentFull": ["documentId"]}
