"""Design platform connector that reads an exported token file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import DesignSyncConfig
from ..errors import DesignSyncError, ExitCode
from ..logging import get_logger
from ..models import DesignToken, TokenCollection


class JsonExportConnector:
    """Loads a raw token collection from ``DESIGN_TOKENS_FILE``.

    Two layouts are accepted: the serialized ``TokenCollection`` shape
    (``{"name", "version", "tokens": [...]}``) and a nested Style Dictionary
    style tree where leaves carry ``value`` and optionally ``type``.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else None
        self.logger = get_logger("collaborators.json")

    def extract_tokens(self, config: DesignSyncConfig) -> TokenCollection:
        path = self.path or config.tokens_file
        if path is None:
            raise DesignSyncError(
                ExitCode.DESIGN_PLATFORM_API_FAILURE,
                "No token export configured; set DESIGN_TOKENS_FILE",
            )
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise DesignSyncError(
                ExitCode.DESIGN_PLATFORM_API_FAILURE, f"Unable to read token export {path}: {exc}"
            ) from exc
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DesignSyncError(
                ExitCode.TOKEN_EXTRACTION_FAILURE, f"Token export {path} is not valid JSON: {exc}"
            ) from exc
        if not isinstance(payload, dict):
            raise DesignSyncError(
                ExitCode.TOKEN_EXTRACTION_FAILURE, f"Token export {path} must contain a JSON object"
            )

        source = config.design_platform or "json"
        if isinstance(payload.get("tokens"), list):
            collection = TokenCollection.from_dict(payload)
            if not collection.source:
                collection.source = source
        else:
            collection = TokenCollection(
                name=str(payload.pop("$name", Path(path).stem)),
                version=str(payload.pop("$version", "1.0.0")),
                source=source,
                tokens=list(_walk_tree(payload, [])),
            )
        self.logger.info("Extracted %d raw tokens from %s", len(collection.tokens), path)
        return collection


def _walk_tree(node: Dict[str, Any], path: List[str]):
    for key, child in node.items():
        if str(key).startswith("$"):
            continue
        if not isinstance(child, dict):
            continue
        if "value" in child:
            yield _leaf_token(path + [str(key)], child)
        else:
            yield from _walk_tree(child, path + [str(key)])


def _leaf_token(path: List[str], leaf: Dict[str, Any]) -> DesignToken:
    token_type: Optional[str] = leaf.get("type")
    if not token_type and path:
        token_type = path[0]
    return DesignToken(
        name="-".join(path),
        type=str(token_type or "other"),
        value=leaf["value"],
        description=leaf.get("description"),
    )


__all__ = ["JsonExportConnector"]
