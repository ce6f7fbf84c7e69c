"""Rule-based conversation clustering by technology, task type and topic."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from talk_analytics.pipeline.concepts import categorize_concepts
from talk_analytics.report import (
    ClusterCollection,
    ConceptEntry,
    ConversationReference,
    SemanticCluster,
)
from talk_analytics.schemas import Conversation

LANGUAGE_PATTERNS: dict[str, re.Pattern[str]] = {
    "JavaScript": re.compile(r"\b(javascript|js|ecmascript)\b", re.I),
    "TypeScript": re.compile(r"\btypescript\b|\.ts\b", re.I),
    "Python": re.compile(r"\bpython\b|\.py\b", re.I),
    "Java": re.compile(r"\bjava\b(?!script)", re.I),
    "Rust": re.compile(r"\brust\b|\.rs\b", re.I),
    "Go": re.compile(r"\b(golang|go)\b|\.go\b", re.I),
    "C++": re.compile(r"\b(c\+\+|cpp)\b|\.cpp\b", re.I),
    "C#": re.compile(r"\b(c#|csharp)\b|\.cs\b", re.I),
    "Ruby": re.compile(r"\bruby\b|\.rb\b", re.I),
    "PHP": re.compile(r"\bphp\b", re.I),
    "Swift": re.compile(r"\bswift\b", re.I),
    "Kotlin": re.compile(r"\bkotlin\b|\.kt\b", re.I),
    "Scala": re.compile(r"\bscala\b", re.I),
    "Haskell": re.compile(r"\bhaskell\b|\.hs\b", re.I),
    "Elixir": re.compile(r"\belixir\b|\.ex\b", re.I),
}
FRAMEWORK_PATTERNS: dict[str, re.Pattern[str]] = {
    "React": re.compile(r"\breact\b", re.I),
    "Vue": re.compile(r"\bvue(\.js)?\b", re.I),
    "Angular": re.compile(r"\bangular\b", re.I),
    "Svelte": re.compile(r"\bsvelte\b", re.I),
    "Next.js": re.compile(r"\bnext(\.js|js)?\b", re.I),
    "Nuxt": re.compile(r"\bnuxt\b", re.I),
    "Express": re.compile(r"\bexpress(\.js)?\b", re.I),
    "Fastify": re.compile(r"\bfastify\b", re.I),
    "Koa": re.compile(r"\bkoa\b", re.I),
    "Django": re.compile(r"\bdjango\b", re.I),
    "Flask": re.compile(r"\bflask\b", re.I),
    "Spring": re.compile(r"\bspring\b", re.I),
    "Laravel": re.compile(r"\blaravel\b", re.I),
    "Rails": re.compile(r"\b(rails|ruby on rails)\b", re.I),
    "ASP.NET": re.compile(r"\basp\.net\b", re.I),
    "Gin": re.compile(r"\bgin\b", re.I),
    "Fiber": re.compile(r"\bfiber\b", re.I),
}
TOOL_PATTERNS: dict[str, re.Pattern[str]] = {
    "Git": re.compile(r"\bgit\b", re.I),
    "Docker": re.compile(r"\bdocker\b", re.I),
    "Kubernetes": re.compile(r"\b(kubernetes|k8s)\b", re.I),
    "npm": re.compile(r"\bnpm\b", re.I),
    "yarn": re.compile(r"\byarn\b", re.I),
    "pnpm": re.compile(r"\bpnpm\b", re.I),
    "Webpack": re.compile(r"\bwebpack\b", re.I),
    "Vite": re.compile(r"\bvite\b", re.I),
    "Rollup": re.compile(r"\brollup\b", re.I),
    "Jest": re.compile(r"\bjest\b", re.I),
    "Vitest": re.compile(r"\bvitest\b", re.I),
    "Mocha": re.compile(r"\bmocha\b", re.I),
    "Cypress": re.compile(r"\bcypress\b", re.I),
    "Playwright": re.compile(r"\bplaywright\b", re.I),
    "ESLint": re.compile(r"\beslint\b", re.I),
    "Prettier": re.compile(r"\bprettier\b", re.I),
    "Babel": re.compile(r"\bbabel\b", re.I),
}
PLATFORM_PATTERNS: dict[str, re.Pattern[str]] = {
    "Node.js": re.compile(r"\bnode(\.js|js)?\b", re.I),
    "Browser": re.compile(r"\b(browser|dom|window)\b", re.I),
    "AWS": re.compile(r"\baws\b|amazon web services", re.I),
    "Azure": re.compile(r"\bazure\b", re.I),
    "GCP": re.compile(r"\b(gcp|google cloud)\b", re.I),
    "Vercel": re.compile(r"\bvercel\b", re.I),
    "Netlify": re.compile(r"\bnetlify\b", re.I),
    "Heroku": re.compile(r"\bheroku\b", re.I),
}

# Checked in order; the first category with a keyword hit wins.
TASK_TYPE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "learning": (
        "how to", "what is", "can you explain", "help me understand", "how do i",
        "what does", "why does", "difference between", "best practice", "recommend",
        "should i", "tutorial", "example", "learn", "new to",
    ),
    "debugging": (
        "error", "bug", "issue", "problem", "fix", "broken", "not working", "fails",
        "crash", "exception", "debug", "troubleshoot", "wrong",
    ),
    "architecture": (
        "architecture", "design pattern", "structure", "organize", "module", "component",
        "system design", "scalable", "maintainable", "separation of concerns",
        "dependency injection",
    ),
    "refactoring": (
        "refactor", "improve", "optimize", "clean up", "better way", "rewrite",
        "restructure", "simplify", "performance", "efficient",
    ),
    "implementation": (
        "implement", "create", "build", "add feature", "develop", "code", "function",
        "class", "method", "algorithm",
    ),
}
TASK_TYPE_LABELS = {
    "debugging": "Debugging & Troubleshooting",
    "architecture": "Architecture & Design",
    "implementation": "Implementation",
    "refactoring": "Code Refactoring",
    "learning": "Learning & Exploration",
    "other": "General Discussion",
}
TASK_TYPE_ORDER = ("debugging", "architecture", "implementation", "refactoring", "learning", "other")
MIN_TECH_CLUSTER_SIZE = 2


@dataclass(frozen=True)
class TechDetection:
    """Technologies mentioned in one conversation, in pattern order."""

    languages: tuple[str, ...] = ()
    frameworks: tuple[str, ...] = ()
    tools: tuple[str, ...] = ()
    platforms: tuple[str, ...] = ()

    def all(self) -> tuple[str, ...]:
        return self.languages + self.frameworks + self.tools + self.platforms


@dataclass
class _TechStackUnion:
    languages: dict[str, None] = field(default_factory=dict)
    frameworks: dict[str, None] = field(default_factory=dict)
    tools: dict[str, None] = field(default_factory=dict)
    platforms: dict[str, None] = field(default_factory=dict)

    def add(self, detection: TechDetection) -> None:
        for name in ("languages", "frameworks", "tools", "platforms"):
            bucket = getattr(self, name)
            for tech in getattr(detection, name):
                bucket.setdefault(tech, None)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "languages": list(self.languages),
            "frameworks": list(self.frameworks),
            "tools": list(self.tools),
            "platforms": list(self.platforms),
        }


def _matches(text: str, patterns: dict[str, re.Pattern[str]]) -> tuple[str, ...]:
    return tuple(name for name, pattern in patterns.items() if pattern.search(text))


def detect_technologies(text: str) -> TechDetection:
    lowered = text.lower()
    return TechDetection(
        languages=_matches(lowered, LANGUAGE_PATTERNS),
        frameworks=_matches(lowered, FRAMEWORK_PATTERNS),
        tools=_matches(lowered, TOOL_PATTERNS),
        platforms=_matches(lowered, PLATFORM_PATTERNS),
    )


def _reference(conversation: Conversation) -> ConversationReference:
    return ConversationReference(
        session_id=conversation.session_id,
        project_name=conversation.project_name,
        timestamp=conversation.started_at,
        relevance_score=1.0,
    )


def cluster_by_tech_stack(conversations: list[Conversation]) -> ClusterCollection:
    """One cluster per language, framework and tool seen in at least two conversations."""

    detections = {conv.session_id: detect_technologies(conv.searchable_content()) for conv in conversations}
    clusters: list[SemanticCluster] = []
    for category, prefix in (("languages", "Language"), ("frameworks", "Framework"), ("tools", "Tool")):
        groups: dict[str, list[Conversation]] = {}
        for conversation in conversations:
            for tech in getattr(detections[conversation.session_id], category):
                groups.setdefault(tech, []).append(conversation)

        for tech, members in groups.items():
            if len(members) < MIN_TECH_CLUSTER_SIZE:
                continue
            stack = _TechStackUnion()
            for member in members:
                stack.add(detections[member.session_id])
            clusters.append(
                SemanticCluster(
                    id=f"{tech}-cluster",
                    type="tech_stack",
                    label=f"{prefix}: {tech}",
                    keywords=[tech],
                    conversations=[_reference(member) for member in members],
                    metadata={
                        "tech_stack": stack.to_dict(),
                        "primary_tech": tech,
                        "category": prefix,
                    },
                )
            )

    return ClusterCollection(clusters=clusters, type="tech_stack", total_conversations=len(conversations))


def categorize_task_type(conversation: Conversation) -> str:
    """Classify a conversation by keyword hits; implementation also requires code blocks."""

    text = conversation.searchable_content()
    for category, keywords in TASK_TYPE_KEYWORDS.items():
        if not any(keyword in text for keyword in keywords):
            continue
        if category == "implementation" and not conversation.has_code_blocks():
            continue
        return category
    return "other"


def cluster_by_task_type(conversations: list[Conversation]) -> ClusterCollection:
    groups: dict[str, list[Conversation]] = {category: [] for category in TASK_TYPE_ORDER}
    for conversation in conversations:
        groups[categorize_task_type(conversation)].append(conversation)

    clusters = [
        SemanticCluster(
            id=f"{category}-cluster",
            type="task_type",
            label=TASK_TYPE_LABELS[category],
            keywords=[category],
            conversations=[_reference(member) for member in members],
            metadata={"category": category},
        )
        for category, members in groups.items()
        if members
    ]
    return ClusterCollection(clusters=clusters, type="task_type", total_conversations=len(conversations))


def cluster_by_topic(
    conversations: list[Conversation],
    concepts: list[ConceptEntry],
) -> ClusterCollection:
    """One cluster per concept category, keyed by the conversations behind its concepts."""

    clusters: list[SemanticCluster] = []
    for category, entries in categorize_concepts(concepts).items():
        related_ids = {session_id for entry in entries for session_id in entry.conversation_ids}
        members = [conv for conv in conversations if conv.session_id in related_ids]
        if not members:
            continue
        clusters.append(
            SemanticCluster(
                id=f"{category}-topic-cluster",
                type="topic",
                label=f"Topic: {category}",
                keywords=[entry.concept for entry in entries[:10]],
                conversations=[_reference(member) for member in members],
                metadata={
                    "category": category,
                    "top_concepts": [entry.concept for entry in entries[:5]],
                },
            )
        )
    return ClusterCollection(clusters=clusters, type="topic", total_conversations=len(conversations))
