"""In-memory concept registry owned by ``UbiquitousLanguageManager``."""

from __future__ import annotations

from collections import deque

from empacy.language.schemas import AcronymEntry
from empacy.language.schemas import Concept
from empacy.language.schemas import ConceptHistoryRecord


class ConceptStore:
    """Concepts keyed by name, the derived domain index, acronyms and history.

    ``domains`` is derived state: the manager rebuilds it from ``concepts``
    after every batch.
    """

    def __init__(self, *, max_history: int = 1000) -> None:
        self.concepts: dict[str, Concept] = {}
        self.domains: dict[str, set[str]] = {}
        self.acronyms: dict[str, AcronymEntry] = {}
        self.history: deque[ConceptHistoryRecord] = deque(maxlen=max_history)

    def index(self, domain: str, name: str) -> None:
        self.domains.setdefault(domain, set()).add(name)

    def unindex(self, domain: str, name: str) -> None:
        bucket = self.domains.get(domain)
        if bucket is None:
            return
        bucket.discard(name)
        if not bucket:
            del self.domains[domain]

    def rebuild_domain_index(self) -> None:
        self.domains = {}
        for concept in self.concepts.values():
            self.index(concept.domain, concept.name)

    def reset(self) -> None:
        self.concepts.clear()
        self.domains.clear()
        self.acronyms.clear()
        self.history.clear()
