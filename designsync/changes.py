"""Structural comparison between normalized token collections."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .logging import get_logger
from .models import DesignToken, TokenCollection


@dataclass
class ChangeSummary:
    """Outcome of comparing the previous snapshot with the current collection."""

    changed: bool
    reason: str
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    modified: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "changed": self.changed,
            "reason": self.reason,
            "added": list(self.added),
            "removed": list(self.removed),
            "modified": list(self.modified),
        }


class ChangeDetector:
    """Decides whether regeneration is required; errors always report a change."""

    def __init__(self) -> None:
        self.logger = get_logger("changes")

    def has_changes(
        self, previous: Optional[TokenCollection], current: TokenCollection
    ) -> bool:
        return self.diff(previous, current).changed

    def diff(
        self, previous: Optional[TokenCollection], current: TokenCollection
    ) -> ChangeSummary:
        if previous is None:
            return ChangeSummary(
                changed=True,
                reason="no previous snapshot",
                added=sorted(token.name for token in current.tokens),
            )
        try:
            return self._compare(previous, current)
        except Exception as exc:  # fail open so regeneration is never skipped by mistake
            self.logger.warning("Change comparison failed, assuming changes: %s", exc)
            return ChangeSummary(changed=True, reason=f"comparison error: {exc}")

    def _compare(self, previous: TokenCollection, current: TokenCollection) -> ChangeSummary:
        before = {token.name: token for token in previous.tokens}
        after = {token.name: token for token in current.tokens}
        added = sorted(set(after) - set(before))
        removed = sorted(set(before) - set(after))
        modified = sorted(
            name for name in set(before) & set(after) if not tokens_equal(before[name], after[name])
        )

        if len(previous.tokens) != len(current.tokens):
            reason = f"token count changed ({len(previous.tokens)} -> {len(current.tokens)})"
        elif added or removed:
            reason = "token names changed"
        elif modified:
            reason = f"{len(modified)} token(s) modified"
        else:
            return ChangeSummary(changed=False, reason="no changes")

        self.logger.debug(
            "Detected changes: +%d -%d ~%d", len(added), len(removed), len(modified)
        )
        return ChangeSummary(
            changed=True, reason=reason, added=added, removed=removed, modified=modified
        )


def tokens_equal(first: DesignToken, second: DesignToken) -> bool:
    if first.type != second.type:
        return False
    if first.category != second.category:
        return False
    if (first.description or None) != (second.description or None):
        return False
    if canonical_json(first.value) != canonical_json(second.value):
        return False
    if len(first.attributes) != len(second.attributes):
        return False
    for key, value in first.attributes.items():
        if key not in second.attributes:
            return False
        if canonical_json(value) != canonical_json(second.attributes[key]):
            return False
    return set(first.tags) == set(second.tags)


def canonical_json(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


__all__ = ["ChangeDetector", "ChangeSummary", "canonical_json", "tokens_equal"]
