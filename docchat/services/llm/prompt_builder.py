"""Prompt templates and builders for LLM."""

import logging
from typing import Dict, List, Optional, Sequence

from docchat.config import settings
from docchat.schemas.chat import Source

logger = logging.getLogger(__name__)

History = Sequence[Dict[str, str]]

_ROLE_LABELS = {"user": "Pengguna", "assistant": "Asisten"}


class PromptBuilder:
    """
    Builds prompts for both chat modes.

    Handles:
    - Numbered source blocks matching the turn's source registry
    - Conversation history windowing
    - Citation marker instructions (``[src:N]``)
    """

    def __init__(
        self,
        organization: str = settings.ORGANIZATION_NAME,
        assistant_name: str = settings.ASSISTANT_NAME,
        history_window: int = settings.HISTORY_WINDOW,
    ) -> None:
        """
        Initialize the prompt builder.

        Args:
            organization: Organization whose documents are served
            assistant_name: Persona name used in the agent system prompt
            history_window: Number of most recent history messages to include
        """
        self.organization = organization
        self.assistant_name = assistant_name
        self.history_window = history_window
        self.logger = logger

    def format_history(self, history: Optional[History]) -> List[Dict[str, str]]:
        """
        Keep only the most recent messages of the conversation.

        Args:
            history: Messages as ``{"role", "content"}`` dicts, oldest first

        Returns:
            At most ``history_window`` messages, oldest first
        """
        if not history or self.history_window <= 0:
            return []
        return [
            {"role": message["role"], "content": message["content"]}
            for message in list(history)[-self.history_window :]
        ]

    @staticmethod
    def format_sources(sources: Sequence[Source]) -> str:
        """Numbered source block; ``[i]`` matches registry number ``i``."""
        return "\n\n".join(
            f"[{i}] {source.document_title} — {source.section_title}\n{source.content}"
            for i, source in enumerate(sources, start=1)
        )

    def build_knowledge_prompt(
        self,
        sources: Sequence[Source],
        question: str,
        history: Optional[History] = None,
    ) -> str:
        """
        Build the single-shot prompt for the retrieve-then-generate pipeline.

        Args:
            sources: Registry sources in display order
            question: User's question
            history: Prior conversation messages

        Returns:
            Complete prompt text
        """
        recent = self.format_history(history)
        history_block = ""
        if recent:
            lines = "\n".join(
                f"{_ROLE_LABELS.get(m['role'], m['role'])}: {m['content']}"
                for m in recent
            )
            history_block = f"\nRIWAYAT PERCAKAPAN:\n{lines}\n"

        prompt = (
            f"Kamu adalah asisten pengetahuan untuk {self.organization}.\n"
            "Jawab pertanyaan pengguna berdasarkan sumber-sumber berikut.\n"
            "Gunakan bahasa Indonesia yang ramah dan jelas.\n\n"
            "PENTING: Sertakan kutipan inline menggunakan format [src:N] "
            "di mana N adalah nomor sumber.\n"
            'Contoh: "Pengajuan kegiatan harus dilakukan minimal 14 hari '
            'sebelumnya [src:1]."\n'
            "Hanya kutip sumber yang benar-benar relevan dengan jawabanmu.\n\n"
            f"SUMBER-SUMBER:\n{self.format_sources(sources)}\n"
            f"{history_block}\n"
            f"PERTANYAAN PENGGUNA:\n{question}\n\n"
            "Jawab berdasarkan sumber di atas. Jika tidak ada informasi yang "
            "relevan, sampaikan dengan jujur."
        )

        self.logger.debug(
            f"Knowledge prompt: {len(prompt)} chars, {len(sources)} sources, "
            f"{len(recent)} history messages"
        )
        return prompt

    def build_agent_system_prompt(self) -> str:
        """System prompt for the tool-calling agent."""
        return (
            f"Kamu adalah {self.assistant_name}, agen AI yang memahami dokumen-dokumen "
            f"penting {self.organization}. Kamu bisa berdiskusi, menganalisis, dan "
            "membandingkan isi dokumen bersama pengguna.\n\n"
            "## Tools\n\n"
            "1. searchDocuments: mencari bagian dokumen yang relevan. Gunakan saat "
            "perlu mencari atau memverifikasi informasi spesifik.\n"
            "2. getDocumentFull: mengambil isi lengkap satu dokumen berdasarkan "
            "documentId dari hasil searchDocuments. Gunakan saat butuh konteks "
            "yang lebih luas.\n\n"
            "Untuk sapaan atau obrolan ringan, jawab langsung tanpa memanggil tools.\n\n"
            "## Cara Mengutip Sumber\n\n"
            "Saat memakai informasi dari dokumen, sertakan kutipan inline dengan "
            "format [src:N], N adalah nilai index bagian dari hasil searchDocuments.\n"
            'Contoh: "Pengajuan kegiatan harus dilakukan minimal 14 hari sebelum '
            'pelaksanaan [src:1]."\n'
            "Hanya kutip sumber yang benar-benar kamu gunakan.\n\n"
            "## Batasan\n\n"
            "- Jawab dalam bahasa Indonesia kecuali diminta lain.\n"
            "- Jika dokumen tidak membahas topik tersebut, katakan dengan jujur dan "
            f"sarankan bertanya ke pengurus {self.organization}. Jangan mengarang."
        )
