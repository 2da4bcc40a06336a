"""Ubiquitous language manager: concept merge, search, acronyms, YAML I/O.

Batches are processed one concept at a time and are not transactional:
concepts handled before a validation failure stay committed.  After every
successful batch short names are back-filled, acronyms re-tested and the
domain index rebuilt from scratch.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Mapping
from datetime import datetime
from datetime import UTC
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from empacy.config import LanguageConfig
from empacy.errors import ValidationError
from empacy.language.acronyms import derive_short_name
from empacy.language.acronyms import is_acronym
from empacy.language.schemas import AcronymEntry
from empacy.language.schemas import Concept
from empacy.language.schemas import ConceptHistoryRecord
from empacy.language.schemas import ConceptInput
from empacy.language.schemas import LanguageStats
from empacy.language.schemas import ScoredConcept
from empacy.language.store import ConceptStore

logger = logging.getLogger(__name__)

# Search weights per matched field.
_NAME_SCORE = 10
_SHORT_NAME_SCORE = 8
_DEFINITION_SCORE = 5
_DOMAIN_SCORE = 3
_SYNONYM_SCORE = 4


def _validation_message(exc: PydanticValidationError) -> str:
    err = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in err.get("loc", ()))
    message = str(err.get("msg", "Invalid concept"))
    return f"Invalid concept field '{location}': {message}" if location else message


def _union(existing: list[str], incoming: Iterable[str]) -> list[str]:
    return list(dict.fromkeys([*existing, *incoming]))


class UbiquitousLanguageManager:
    """Owns the concept registry, domain index and acronym registry."""

    def __init__(
        self,
        store: ConceptStore | None = None,
        *,
        config: LanguageConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or LanguageConfig()
        self.store = (
            store
            if store is not None
            else ConceptStore(max_history=self.config.max_history)
        )
        self._clock = clock or (lambda: datetime.now(tz=UTC))

    # ------------------------------------------------------------------
    # Batch update
    # ------------------------------------------------------------------

    def update_concepts(self, concepts: Iterable[Mapping[str, Any]]) -> dict[str, int]:
        """Create or merge each concept in order, then refresh derived state.

        Raises ``ValidationError`` on the first malformed concept.
        """
        if isinstance(concepts, (str, bytes, Mapping)) or not isinstance(
            concepts, Iterable
        ):
            raise ValidationError("concepts must be a list of concept objects")
        items = list(concepts)
        logger.info("Updating ubiquitous language with %d concepts", len(items))
        for raw in items:
            self._process_concept(raw)

        generated = self.generate_acronyms()
        self.update_domain_concepts()
        logger.info(
            "Ubiquitous language updated: %d concepts processed, %d short names generated",
            len(items),
            generated,
        )
        return {"conceptsProcessed": len(items), "totalConcepts": len(self.store.concepts)}

    def _process_concept(self, raw: Mapping[str, Any]) -> Concept:
        if not isinstance(raw, Mapping):
            raise ValidationError("Concept must be an object")
        try:
            concept_input = ConceptInput.model_validate(raw)
        except PydanticValidationError as exc:
            raise ValidationError(_validation_message(exc)) from exc

        existing = self.store.concepts.get(concept_input.name)
        if existing is None:
            concept = self._create(concept_input)
            action = "concept_created"
        else:
            concept = self._merge(existing, concept_input)
            action = "concept_updated"

        self.store.history.append(
            ConceptHistoryRecord(
                timestamp=self._clock(),
                concept_name=concept.name,
                action=action,
                changes={
                    "definition": concept_input.definition,
                    "domain": concept_input.domain,
                    "shortName": concept_input.short_name,
                },
            )
        )
        return concept

    def _create(self, data: ConceptInput) -> Concept:
        now = self._clock()
        metadata: dict[str, Any] = {
            "source": data.source or "user-input",
            "confidence": data.confidence or "high",
            "tags": list(data.tags or []),
        }
        metadata.update(data.metadata or {})

        concept = Concept(
            id=f"concept_{uuid.uuid4().hex[:16]}",
            name=data.name,
            short_name=data.short_name or self._short_name(data.name),
            domain=data.domain,
            definition=data.definition,
            synonyms=_union([], data.synonyms or []),
            related_concepts=_union([], data.related_concepts or []),
            version=1,
            metadata=metadata,
            created_at=now,
            last_updated=now,
        )
        self.store.concepts[concept.name] = concept
        self.store.index(concept.domain, concept.name)
        self._check_acronym(concept)
        logger.debug("Created concept %s (%s)", concept.name, concept.short_name)
        return concept

    def _merge(self, concept: Concept, data: ConceptInput) -> Concept:
        old_domain = concept.domain
        if data.definition:
            concept.definition = data.definition
        if data.domain:
            concept.domain = data.domain
        if data.synonyms:
            concept.synonyms = _union(concept.synonyms, data.synonyms)
        if data.related_concepts:
            concept.related_concepts = _union(
                concept.related_concepts, data.related_concepts
            )
        if data.metadata:
            concept.metadata = {**concept.metadata, **data.metadata}
        concept.version += 1
        concept.last_updated = self._clock()

        if concept.domain != old_domain:
            self.store.unindex(old_domain, concept.name)
            self.store.index(concept.domain, concept.name)
        logger.debug("Merged concept %s (v%d)", concept.name, concept.version)
        return concept

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def _short_name(self, name: str) -> str:
        return derive_short_name(
            name, single_word_length=self.config.single_word_short_name_length
        )

    def _check_acronym(self, concept: Concept) -> bool:
        if not is_acronym(
            concept.short_name,
            concept.name,
            min_length=self.config.acronym_min_length,
            max_length=self.config.acronym_max_length,
        ):
            return False
        self.store.acronyms[concept.short_name] = AcronymEntry(
            acronym=concept.short_name,
            concept_name=concept.name,
            domain=concept.domain,
            definition=concept.definition,
            created_at=concept.created_at,
        )
        return True

    def generate_acronyms(self) -> int:
        """Back-fill missing short names and register every valid acronym.

        Returns the number of short names generated.
        """
        generated = 0
        for concept in self.store.concepts.values():
            if len(concept.short_name) < self.config.acronym_min_length:
                concept.short_name = self._short_name(concept.name)
                generated += 1
            self._check_acronym(concept)
        return generated

    def update_domain_concepts(self) -> None:
        """Discard and rebuild the domain → concept-name index."""
        self.store.rebuild_domain_index()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_concept(self, name: str) -> Concept | None:
        return self.store.concepts.get(name)

    def get_concepts_by_domain(self, domain: str) -> list[Concept]:
        names = sorted(self.store.domains.get(domain, set()))
        return [self.store.concepts[name] for name in names]

    def get_all_concepts(self) -> list[Concept]:
        return list(self.store.concepts.values())

    def get_acronym_registry(self) -> list[AcronymEntry]:
        return list(self.store.acronyms.values())

    def get_history(self, limit: int = 100) -> list[ConceptHistoryRecord]:
        return list(self.store.history)[-limit:] if limit > 0 else []

    def score_concept(self, concept: Concept, query: str) -> int:
        """Case-insensitive substring score of *concept* against *query*."""
        term = query.lower()
        score = 0
        if term in concept.name.lower():
            score += _NAME_SCORE
        if concept.short_name and term in concept.short_name.lower():
            score += _SHORT_NAME_SCORE
        if term in concept.definition.lower():
            score += _DEFINITION_SCORE
        if term in concept.domain.lower():
            score += _DOMAIN_SCORE
        if any(term in synonym.lower() for synonym in concept.synonyms):
            score += _SYNONYM_SCORE
        return score

    def search_scored(
        self,
        query: str,
        *,
        domain: str | None = None,
        limit: int | None = None,
    ) -> list[ScoredConcept]:
        """Rank concepts by score (desc) then name (asc); zero scores dropped."""
        results = [
            ScoredConcept(concept=concept, score=score)
            for concept in self.store.concepts.values()
            if (score := self.score_concept(concept, query)) > 0
        ]
        results.sort(key=lambda item: (-item.score, item.concept.name))
        if domain:
            results = [item for item in results if item.concept.domain == domain]
        if limit:
            results = results[:limit]
        return results

    def search_concepts(
        self,
        query: str,
        *,
        domain: str | None = None,
        limit: int | None = None,
    ) -> list[Concept]:
        return [
            item.concept
            for item in self.search_scored(query, domain=domain, limit=limit)
        ]

    def get_stats(self) -> LanguageStats:
        return LanguageStats(
            total_concepts=len(self.store.concepts),
            total_domains=len(self.store.domains),
            total_acronyms=len(self.store.acronyms),
            total_history=len(self.store.history),
            domain_breakdown={
                domain: len(names) for domain, names in self.store.domains.items()
            },
        )

    # ------------------------------------------------------------------
    # YAML interchange
    # ------------------------------------------------------------------

    def export_to_yaml(self) -> str:
        """Serialize concepts grouped by domain, acronyms and counts."""
        domains = []
        for domain in sorted(self.store.domains):
            domains.append(
                {
                    "name": domain,
                    "concepts": [
                        concept.to_wire(
                            include={
                                "name",
                                "short_name",
                                "definition",
                                "synonyms",
                                "related_concepts",
                                "metadata",
                            }
                        )
                        for concept in self.get_concepts_by_domain(domain)
                    ],
                }
            )
        document = {
            "domains": domains,
            "acronyms": [entry.to_wire() for entry in self.get_acronym_registry()],
            "metadata": {
                "totalConcepts": len(self.store.concepts),
                "totalDomains": len(self.store.domains),
                "totalAcronyms": len(self.store.acronyms),
                "lastUpdated": self._clock().isoformat(),
            },
        }
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)

    def import_from_yaml(self, content: str) -> dict[str, int]:
        """Replay every exported concept through the normal create/merge path.

        Re-importing the same document converges on the same field values
        but bumps versions and history each time.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise ValidationError(f"Invalid YAML: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValidationError("Ubiquitous language document must be a mapping")

        concepts: list[dict[str, Any]] = []
        for domain in data.get("domains") or []:
            if not isinstance(domain, Mapping):
                raise ValidationError("Each domain entry must be a mapping")
            for concept in domain.get("concepts") or []:
                if not isinstance(concept, Mapping):
                    raise ValidationError("Each concept entry must be a mapping")
                concepts.append({**concept, "domain": domain.get("name")})

        result = self.update_concepts(concepts)
        logger.info("Imported %d concepts from YAML", result["conceptsProcessed"])
        return {
            "conceptsImported": result["conceptsProcessed"],
            "totalConcepts": result["totalConcepts"],
        }
