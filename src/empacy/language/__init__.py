"""Language domain: ubiquitous language concepts, acronyms and YAML I/O."""

from empacy.language.acronyms import derive_short_name
from empacy.language.acronyms import initials
from empacy.language.acronyms import is_acronym
from empacy.language.manager import UbiquitousLanguageManager
from empacy.language.schemas import AcronymEntry
from empacy.language.schemas import Concept
from empacy.language.schemas import ConceptHistoryRecord
from empacy.language.schemas import ConceptInput
from empacy.language.schemas import LanguageStats
from empacy.language.store import ConceptStore

__all__ = [
    "AcronymEntry",
    "Concept",
    "ConceptHistoryRecord",
    "ConceptInput",
    "ConceptStore",
    "LanguageStats",
    "UbiquitousLanguageManager",
    "derive_short_name",
    "initials",
    "is_acronym",
]
