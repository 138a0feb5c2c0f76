"""Core data models shared across designsync components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

TOKEN_TYPES = (
    "color",
    "typography",
    "spacing",
    "sizing",
    "shadow",
    "border",
    "opacity",
    "other",
)

DEFAULT_CATEGORIES: Dict[str, str] = {
    "color": "colors",
    "typography": "typography",
    "spacing": "spacing",
    "sizing": "sizing",
    "shadow": "effects",
    "border": "borders",
    "opacity": "opacity",
    "other": "other",
}


@dataclass
class DesignToken:
    """A named, typed design decision."""

    name: str
    type: str
    value: Any
    category: str = ""
    description: Optional[str] = None
    tags: Set[str] = field(default_factory=set)
    attributes: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "category": self.category,
            "value": self.value,
            "description": self.description,
            "tags": sorted(self.tags),
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "DesignToken":
        tags = payload.get("tags") or []
        attributes = payload.get("attributes") or {}
        return cls(
            name=str(payload.get("name") or ""),
            type=str(payload.get("type") or ""),
            value=payload.get("value"),
            category=str(payload.get("category") or ""),
            description=payload.get("description"),
            tags={str(tag) for tag in tags} if isinstance(tags, (list, tuple, set)) else set(),
            attributes=dict(attributes) if isinstance(attributes, dict) else {},
        )


@dataclass
class TokenCollection:
    """An ordered set of tokens extracted from one design platform."""

    name: str
    version: str = "1.0.0"
    source: str = ""
    tokens: List[DesignToken] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def by_type(self, token_type: str) -> List[DesignToken]:
        return [token for token in self.tokens if token.type == token_type]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "source": self.source,
            "tokens": [token.to_dict() for token in self.tokens],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "TokenCollection":
        raw_tokens = payload.get("tokens") or []
        tokens = [DesignToken.from_dict(item) for item in raw_tokens if isinstance(item, dict)]
        metadata = payload.get("metadata") or {}
        return cls(
            name=str(payload.get("name") or ""),
            version=str(payload.get("version") or "1.0.0"),
            source=str(payload.get("source") or ""),
            tokens=tokens,
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
        )


@dataclass
class CustomSection:
    """Hand-written region preserved across regeneration."""

    name: str
    content: str
    start_line: int = 0
    end_line: int = 0


@dataclass
class GeneratedFile:
    """A single artifact produced by a platform generator."""

    file_path: str
    content: str
    has_custom_sections: bool = False
    custom_sections: List[CustomSection] = field(default_factory=list)


@dataclass
class GenerationResult:
    """Aggregate output of one platform generator run."""

    platform: str
    files: List[GeneratedFile] = field(default_factory=list)
    success: bool = True
    error_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TagTemplateResult:
    """Resolved tag plus the placeholder values used to build it."""

    template: str
    generated_tag: str
    token_values: Dict[str, str]
    generated_at: datetime
    metadata: Dict[str, Any] = field(default_factory=dict)
