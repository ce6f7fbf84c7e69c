"""Concept extraction over conversation text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache

import spacy
from spacy.language import Language
from spacy.tokens import Doc

from talk_analytics.pipeline.text_analysis import STOP_WORDS
from talk_analytics.report import ConceptEntry
from talk_analytics.schemas import Conversation

logger = logging.getLogger(__name__)


class ConceptExtractionError(ValueError):
    """Raised when concept extraction parameters are invalid."""


CODE_CONCEPT_PATTERNS: dict[str, re.Pattern[str]] = {
    "error handling": re.compile(r"error[- ]?handl(ing|er)", re.I),
    "data structure": re.compile(r"data[- ]?struct", re.I),
    "algorithm": re.compile(r"algorithm|algo\b", re.I),
    "API design": re.compile(r"api[- ]?design", re.I),
    "database schema": re.compile(r"database[- ]?schema|db[- ]?schema", re.I),
    "authentication": re.compile(r"auth(entication)?|oauth|jwt", re.I),
    "authorization": re.compile(r"authorization|access[- ]?control", re.I),
    "state management": re.compile(r"state[- ]?manag", re.I),
    "dependency injection": re.compile(r"dependency[- ]?inject", re.I),
    "test driven development": re.compile(r"tdd|test[- ]?driven", re.I),
    "continuous integration": re.compile(r"ci/cd|continuous[- ]?integrat", re.I),
    "code review": re.compile(r"code[- ]?review", re.I),
    "performance optimization": re.compile(r"perform.*optimi|optimi.*perform", re.I),
    "memory leak": re.compile(r"memory[- ]?leak", re.I),
    "race condition": re.compile(r"race[- ]?condition", re.I),
    "async programming": re.compile(r"async|asynchronous[- ]?programm", re.I),
}

TOOL_CONCEPT_PATTERNS: dict[str, re.Pattern[str]] = {
    "version control": re.compile(r"git|version[- ]?control|vcs", re.I),
    "containerization": re.compile(r"docker|container", re.I),
    "package management": re.compile(r"npm|yarn|pnpm|pip|cargo", re.I),
    "build system": re.compile(r"webpack|vite|rollup|build[- ]?system", re.I),
    "testing framework": re.compile(r"jest|vitest|mocha|pytest|testing[- ]?framework", re.I),
    "linting": re.compile(r"eslint|prettier|lint", re.I),
    "deployment": re.compile(r"deploy|ci/cd|pipeline", re.I),
    "monitoring": re.compile(r"monitor|observ|telemetry", re.I),
}

# First matching category wins.
CATEGORY_PATTERNS: dict[str, re.Pattern[str]] = {
    "Architecture": re.compile(r"design|pattern|architecture|structure|component", re.I),
    "Development": re.compile(r"develop|implement|build|create|code", re.I),
    "Testing": re.compile(r"test|quality|coverage|assertion", re.I),
    "Performance": re.compile(r"performance|optimi|speed|memory|efficient", re.I),
    "Security": re.compile(r"security|auth|encrypt|vulnerability|safe", re.I),
    "DevOps": re.compile(r"deploy|ci|cd|pipeline|docker|kubernetes", re.I),
    "Database": re.compile(r"database|query|schema|migration|orm", re.I),
    "Frontend": re.compile(r"ui|ux|component|react|vue|angular", re.I),
    "Backend": re.compile(r"api|server|backend|endpoint|middleware", re.I),
}
DEFAULT_CATEGORY = "General"

DEFAULT_SPACY_MODEL = "en_core_web_sm"
MIN_PHRASE_WORDS = 2
MAX_PHRASE_WORDS = 4
_PHRASE_POS = frozenset({"NOUN", "PROPN", "ADJ"})


@dataclass(frozen=True)
class ConceptConfig:
    """Extraction thresholds, vocabulary toggles and the spaCy pipeline to parse with."""

    min_occurrences: int = 2
    max_concepts: int = 50
    include_code_concepts: bool = True
    include_tool_concepts: bool = True
    spacy_model: str = DEFAULT_SPACY_MODEL


@lru_cache(maxsize=2)
def load_language_model(name: str = DEFAULT_SPACY_MODEL) -> Language:
    """Load a spaCy pipeline once per process. Entity recognition is not needed."""

    logger.info("Loading spaCy model %s", name)
    return spacy.load(name, exclude=["ner"])


def phrase_from_words(words: list[str]) -> str | None:
    """Join at most the trailing four words, or return None for a single word."""

    if len(words) < MIN_PHRASE_WORDS:
        return None
    phrase = " ".join(words[-MAX_PHRASE_WORDS:])
    return phrase if len(phrase) > 3 else None


def noun_phrases_from_doc(doc: Doc) -> list[str]:
    """Distinct lowercased noun phrases from a parsed document.

    Each noun chunk keeps its alphabetic nouns, proper nouns and adjectives;
    determiners, pronouns and stopwords are dropped.
    """

    phrases: dict[str, None] = {}
    for chunk in doc.noun_chunks:
        words = [
            token.lower_
            for token in chunk
            if token.is_alpha
            and token.pos_ in _PHRASE_POS
            and not token.is_stop
            and token.lower_ not in STOP_WORDS
        ]
        phrase = phrase_from_words(words)
        if phrase is not None:
            phrases.setdefault(phrase, None)
    return list(phrases)


def extract_noun_phrases(text: str, model: str = DEFAULT_SPACY_MODEL) -> list[str]:
    nlp = load_language_model(model)
    return noun_phrases_from_doc(nlp(text[: nlp.max_length]))


def _match_vocabulary(text: str, patterns: dict[str, re.Pattern[str]]) -> dict[str, set[str]]:
    matched: dict[str, set[str]] = {}
    for concept, pattern in patterns.items():
        terms = {match.group(0).lower() for match in pattern.finditer(text)}
        if terms:
            matched[concept] = terms
    return matched


def _concepts_for_conversation(
    conversation: Conversation,
    doc: Doc,
    config: ConceptConfig,
) -> dict[str, set[str]]:
    text = conversation.searchable_content()
    found: dict[str, set[str]] = {phrase: set() for phrase in noun_phrases_from_doc(doc)}
    if config.include_code_concepts:
        for concept, terms in _match_vocabulary(text, CODE_CONCEPT_PATTERNS).items():
            found.setdefault(concept, set()).update(terms)
    if config.include_tool_concepts:
        for concept, terms in _match_vocabulary(text, TOOL_CONCEPT_PATTERNS).items():
            found.setdefault(concept, set()).update(terms)
    return found


def extract_concepts(
    conversations: list[Conversation],
    config: ConceptConfig | None = None,
) -> list[ConceptEntry]:
    """Aggregate per-conversation concepts into ranked entries.

    Each conversation contributes at most one occurrence per concept. Entries below
    `min_occurrences` are dropped; the rest are sorted by occurrences descending
    (stable on first appearance) and truncated to `max_concepts`.
    """

    cfg = config or ConceptConfig()
    if cfg.min_occurrences < 0:
        raise ConceptExtractionError(f"min_occurrences must be >= 0, got {cfg.min_occurrences}.")
    if cfg.max_concepts < 0:
        raise ConceptExtractionError(f"max_concepts must be >= 0, got {cfg.max_concepts}.")
    if not conversations:
        return []

    nlp = load_language_model(cfg.spacy_model)
    docs = nlp.pipe(conversation.searchable_text()[: nlp.max_length] for conversation in conversations)

    occurrences: dict[str, int] = {}
    related_terms: dict[str, dict[str, None]] = {}
    conversation_ids: dict[str, dict[str, None]] = {}
    for conversation, doc in zip(conversations, docs, strict=True):
        for concept, terms in _concepts_for_conversation(conversation, doc, cfg).items():
            occurrences[concept] = occurrences.get(concept, 0) + 1
            bucket = related_terms.setdefault(concept, {})
            for term in sorted(terms):
                bucket.setdefault(term, None)
            conversation_ids.setdefault(concept, {}).setdefault(conversation.session_id, None)

    entries = [
        ConceptEntry(
            concept=concept,
            related_terms=list(related_terms[concept]),
            occurrences=count,
            conversation_ids=list(conversation_ids[concept]),
        )
        for concept, count in occurrences.items()
        if count >= cfg.min_occurrences
    ]
    entries.sort(key=lambda entry: entry.occurrences, reverse=True)
    return entries[: cfg.max_concepts]


def categorize_concepts(concepts: list[ConceptEntry]) -> dict[str, list[ConceptEntry]]:
    """Bucket concepts into fixed categories, first match on the concept or its terms."""

    categories: dict[str, list[ConceptEntry]] = {}
    for entry in concepts:
        category = DEFAULT_CATEGORY
        for name, pattern in CATEGORY_PATTERNS.items():
            if pattern.search(entry.concept) or any(pattern.search(t) for t in entry.related_terms):
                category = name
                break
        categories.setdefault(category, []).append(entry)
    return categories


def extract_key_topics(concepts: list[ConceptEntry], limit: int = 10) -> list[str]:
    ranked = sorted(concepts, key=lambda entry: entry.occurrences, reverse=True)
    return [entry.concept for entry in ranked[:limit]]
