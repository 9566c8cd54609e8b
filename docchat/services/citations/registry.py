"""Per-turn source registry with stable 1-based display numbers."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from docchat.schemas.chat import Source

RegistryKey = Tuple[str, str]


@dataclass
class SourceAccumulator:
    """
    Passages collected by a single retrieval call.

    Handed to a retrieval tool, filled, and returned to the caller, which
    merges it into the turn's registry once the call has completed.
    """

    passages: List[Source] = field(default_factory=list)

    def add(self, passage: Source) -> None:
        self.passages.append(passage)

    def extend(self, passages: Iterable[Source]) -> None:
        self.passages.extend(passages)

    def __len__(self) -> int:
        return len(self.passages)


class SourceRegistry:
    """
    Ordered, de-duplicated list of passages surfaced during one turn.

    A passage is identified by ``(document_title, section_title)``. The first
    time a key is seen it is appended and numbered ``len(registry) + 1``; later
    sightings keep that number. A registry is built fresh for every user
    message and never shared between turns.
    """

    def __init__(self, passages: Optional[Iterable[Source]] = None) -> None:
        self._sources: List[Source] = []
        self._numbers: Dict[RegistryKey, int] = {}
        if passages is not None:
            self.extend(passages)

    def add(self, passage: Source) -> int:
        """
        Register a passage.

        Args:
            passage: Retrieved passage

        Returns:
            The passage's 1-based display number
        """
        key = passage.registry_key
        number = self._numbers.get(key)
        if number is None:
            self._sources.append(passage)
            number = len(self._sources)
            self._numbers[key] = number
        return number

    def extend(self, passages: Iterable[Source]) -> List[int]:
        """Register passages in retrieval-rank order, returning their numbers."""
        return [self.add(passage) for passage in passages]

    def merge(self, accumulator: SourceAccumulator) -> List[int]:
        """Merge a completed retrieval call's passages into the registry."""
        return self.extend(accumulator.passages)

    def number_of(self, passage: Source) -> Optional[int]:
        """Display number of an already registered passage, if any."""
        return self._numbers.get(passage.registry_key)

    @property
    def sources(self) -> List[Source]:
        """Registered passages in display order (position ``n - 1`` holds ``[n]``)."""
        return list(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def __iter__(self) -> Iterator[Source]:
        return iter(self._sources)

    def __bool__(self) -> bool:
        return bool(self._sources)
