"""Tests for full document lookups."""

from uuid import uuid4

import pytest

from docchat.services.document_service import DocumentService, FullDocument, SectionContent


@pytest.mark.unit
@pytest.mark.asyncio
class TestDocumentService:
    """Test DocumentService.get_document_full."""

    async def test_sections_in_reading_order(self, test_db, seeded_documents):
        """Sections come back sorted by section_order, not insertion order."""
        document_id = str(seeded_documents["membership"].id)

        document = await DocumentService(test_db).get_document_full(document_id)

        assert document.title == "AD/ART"
        assert document.doc_type == "anggaran dasar"
        assert [s.section_title for s in document.sections] == [
            "Nama dan Kedudukan",
            "Keanggotaan",
        ]
        assert document.render().startswith(
            "## Nama dan Kedudukan\nOrganisasi ini bernama Keluarga Mahasiswa.\n\n## Keanggotaan"
        )

    async def test_unknown_document(self, test_db, seeded_documents):
        assert await DocumentService(test_db).get_document_full(str(uuid4())) is None

    async def test_malformed_id(self, test_db, seeded_documents):
        assert await DocumentService(test_db).get_document_full("bukan-uuid") is None


@pytest.mark.unit
def test_render_empty_document():
    assert FullDocument(title="Kosong", doc_type="umum").render() == ""


@pytest.mark.unit
def test_render_joins_sections():
    document = FullDocument(
        title="Pedoman",
        doc_type="pedoman",
        sections=[SectionContent("A", "isi a", 1), SectionContent("B", "isi b", 2)],
    )

    assert document.render() == "## A\nisi a\n\n## B\nisi b"
