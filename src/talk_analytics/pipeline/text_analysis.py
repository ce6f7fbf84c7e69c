"""Shared text normalization, tokenization and term extraction helpers."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from talk_analytics.schemas import Conversation


CHINESE_STOP_WORDS = frozenset(
    {
        "的", "了", "和", "是", "就", "都", "而", "及", "与", "着", "或", "一个",
        "没有", "我们", "你们", "他们", "这个", "那个", "这些", "那些", "自己",
        "什么", "怎么", "因为", "所以", "但是", "如果", "可以", "这样", "我", "你",
        "他", "她", "它", "在", "也", "有", "不", "人", "这", "那", "吗", "呢", "吧",
    }
)
STOP_WORDS = frozenset(ENGLISH_STOP_WORDS) | CHINESE_STOP_WORDS

_URL = re.compile(r"https?://\S+")
_EMAIL = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
_CODE_FENCE = re.compile(r"```[\s\S]*?```")
_INLINE_CODE = re.compile(r"`[^`]+`")
_MARKDOWN_MARKS = re.compile(r"[*_~`]")
_WHITESPACE = re.compile(r"\s+")
_TOKEN_SPLIT = re.compile(r"[\s,;:!?()\[\]{}'\"<>/\\]+")
_DIGITS_ONLY = re.compile(r"^\d+$")
_HAS_LETTER = re.compile(r"[a-zA-Z\u4e00-\u9fa5]")

_TECHNICAL_PATTERNS = (
    re.compile(r"\b(javascript|typescript|python|java|rust|go|c\+\+|c#|ruby|php|swift|kotlin)\b", re.I),
    re.compile(r"\b(react|vue|angular|next\.js|express|django|flask|spring|laravel)\b", re.I),
    re.compile(r"\b(git|docker|kubernetes|npm|yarn|webpack|vite|jest|vitest)\b", re.I),
    re.compile(r"\b(api|rest|graphql|sql|nosql|http|https|json|xml|yaml)\b", re.I),
)


def normalize_text(text: str) -> str:
    """Strip URLs, emails, code and markdown marks, then collapse whitespace."""

    cleaned = _URL.sub("", text)
    cleaned = _EMAIL.sub("", cleaned)
    cleaned = _CODE_FENCE.sub("", cleaned)
    cleaned = _INLINE_CODE.sub("", cleaned)
    cleaned = _MARKDOWN_MARKS.sub("", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def tokenize(text: str) -> list[str]:
    return [token for token in _TOKEN_SPLIT.split(normalize_text(text)) if token]


def filter_tokens(
    tokens: Iterable[str],
    *,
    min_length: int = 2,
    max_length: int = 50,
) -> list[str]:
    """Lowercase tokens and drop stopwords, bare numbers and symbol-only tokens."""

    filtered: list[str] = []
    for token in tokens:
        lowered = token.lower()
        if lowered in STOP_WORDS:
            continue
        if not min_length <= len(lowered) <= max_length:
            continue
        if _DIGITS_ONLY.match(lowered) or not _HAS_LETTER.search(lowered):
            continue
        filtered.append(lowered)
    return filtered


def extract_technical_terms(text: str) -> list[str]:
    """Return distinct lowercased technology mentions in first-seen order."""

    terms: dict[str, None] = {}
    for pattern in _TECHNICAL_PATTERNS:
        for match in pattern.finditer(text):
            terms.setdefault(match.group(0).lower(), None)
    return list(terms)


def iter_message_texts(conversations: Iterable[Conversation]) -> Iterable[tuple[str, str]]:
    """Yield `(session_id, content)` for every non-blank message."""

    for conversation in conversations:
        for message in conversation.messages:
            if message.content.strip():
                yield conversation.session_id, message.content


def month_key(value: datetime) -> date:
    """First day of the calendar month containing `value`."""

    return date(value.year, value.month, 1)
