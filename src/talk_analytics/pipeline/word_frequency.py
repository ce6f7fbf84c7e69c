"""TF-IDF word entries and n-gram phrases for the word cloud."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

import numpy as np

from talk_analytics.pipeline.text_analysis import filter_tokens, iter_message_texts, tokenize
from talk_analytics.report import PhraseEntry, WordCloudData, WordEntry
from talk_analytics.schemas import Conversation

LANGUAGE_TERMS = frozenset(
    {
        "javascript", "typescript", "python", "java", "rust", "go", "c++", "cpp", "c#",
        "csharp", "ruby", "php", "swift", "kotlin", "scala", "haskell", "elixir",
        "clojure", "dart", "lua",
    }
)
FRAMEWORK_TERMS = frozenset(
    {
        "react", "vue", "angular", "svelte", "next", "nextjs", "nuxt", "express",
        "fastify", "koa", "django", "flask", "spring", "laravel", "rails", "gin",
        "fiber", "actix",
    }
)
TOOL_TERMS = frozenset(
    {
        "git", "github", "gitlab", "docker", "kubernetes", "k8s", "npm", "yarn", "pnpm",
        "webpack", "vite", "rollup", "parcel", "jest", "vitest", "mocha", "cypress",
        "playwright", "eslint", "prettier", "babel",
    }
)
CONCEPT_TERMS = frozenset(
    {
        "api", "rest", "graphql", "grpc", "websocket", "database", "sql", "nosql",
        "redis", "mongodb", "postgres", "http", "https", "json", "xml", "yaml",
        "authentication", "authorization", "jwt", "oauth", "testing", "deployment",
        "ci", "cd", "devops",
    }
)
CONTEXT_CHARS = 50
MAX_PHRASE_CONTEXTS = 3


@dataclass(frozen=True)
class FrequencyConfig:
    """Thresholds for word and phrase extraction."""

    min_frequency: int = 2
    max_words: int = 100
    ngram_sizes: tuple[int, ...] = (2, 3)
    include_technical_terms: bool = True


@dataclass
class _PhraseStats:
    count: int = 0
    contexts: list[str] = field(default_factory=list)


def categorize_term(term: str) -> str | None:
    """Map a lowercased term to `language`, `framework`, `tool` or `concept`."""

    if term in LANGUAGE_TERMS:
        return "language"
    if term in FRAMEWORK_TERMS:
        return "framework"
    if term in TOOL_TERMS:
        return "tool"
    if term in CONCEPT_TERMS:
        return "concept"
    return None


def _phrase_context(text: str, phrase: str) -> str | None:
    index = text.lower().find(phrase)
    if index == -1:
        return None
    start = max(0, index - CONTEXT_CHARS)
    end = min(len(text), index + len(phrase) + CONTEXT_CHARS)
    context = text[start:end]
    if start > 0:
        context = "..." + context
    if end < len(text):
        context = context + "..."
    return context.strip()


def _ngrams(tokens: list[str], size: int) -> list[str]:
    return [" ".join(tokens[index : index + size]) for index in range(len(tokens) - size + 1)]


def analyze_frequencies(
    conversations: list[Conversation],
    config: FrequencyConfig | None = None,
) -> WordCloudData:
    """Build the word and phrase views of the word cloud.

    Each term is weighted `tf * log(N / df)`, where tf is its total count, N the number
    of conversations and df the number of conversations mentioning it. Terms below
    `min_frequency` weight are dropped. Concepts are attached later by the pipeline.
    """

    cfg = config or FrequencyConfig()
    term_counts: Counter[str] = Counter()
    term_documents: dict[str, set[str]] = {}
    phrases: dict[str, _PhraseStats] = {}
    total_tokens = 0
    unique_terms: set[str] = set()

    for session_id, content in iter_message_texts(conversations):
        raw_tokens = tokenize(content)
        total_tokens += len(raw_tokens)
        tokens = filter_tokens(raw_tokens)
        unique_terms.update(tokens)
        term_counts.update(tokens)
        for term in set(tokens):
            term_documents.setdefault(term, set()).add(session_id)

        for size in cfg.ngram_sizes:
            for phrase in _ngrams(tokens, size):
                stats = phrases.setdefault(phrase, _PhraseStats())
                stats.count += 1
                context = _phrase_context(content, phrase)
                if context and context not in stats.contexts:
                    stats.contexts.append(context)

    words: list[WordEntry] = []
    if term_counts:
        terms = list(term_counts)
        tf = np.array([term_counts[term] for term in terms], dtype=float)
        df = np.array([len(term_documents[term]) for term in terms], dtype=float)
        weights = tf * np.log(max(len(conversations), 1) / df)
        for term, weight in zip(terms, weights.tolist()):
            if weight < cfg.min_frequency:
                continue
            words.append(
                WordEntry(
                    text=term,
                    value=int(round(weight)),
                    weight=float(weight),
                    category=categorize_term(term) if cfg.include_technical_terms else None,
                )
            )
        words.sort(key=lambda entry: entry.weight, reverse=True)

    phrase_entries = [
        PhraseEntry(
            text=phrase,
            frequency=stats.count,
            contexts=stats.contexts[:MAX_PHRASE_CONTEXTS],
        )
        for phrase, stats in phrases.items()
        if stats.count >= cfg.min_frequency
    ]
    phrase_entries.sort(key=lambda entry: entry.frequency, reverse=True)

    return WordCloudData(
        words=words[: cfg.max_words],
        phrases=phrase_entries[: cfg.max_words],
        concepts=[],
        mode="word",
        total_tokens=total_tokens,
        unique_tokens=len(unique_terms),
    )
