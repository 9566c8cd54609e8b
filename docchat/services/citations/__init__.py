"""Citation marker reconciliation and per-turn source registry."""

from docchat.services.citations.parser import ParseResult, parse_citations
from docchat.services.citations.registry import SourceAccumulator, SourceRegistry

__all__ = [
    "ParseResult",
    "SourceAccumulator",
    "SourceRegistry",
    "parse_citations",
]
