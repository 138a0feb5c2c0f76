"""Sample token collections shared across tests."""

from __future__ import annotations

from typing import Any, Dict, List

from designsync.models import DesignToken, TokenCollection


def raw_tokens() -> List[DesignToken]:
    """A small, deliberately messy raw extraction covering every token type."""
    return [
        DesignToken(name="Brand/Primary", type="colour", value="rgb(255,0,0)", description="Main brand color"),
        DesignToken(name="brand secondary", type="fill", value="#0af"),
        DesignToken(name="surfaceBackground", type="color", value={"r": 1, "g": 1, "b": 1}),
        DesignToken(
            name="heading.large",
            type="font",
            value={"fontFamily": "Inter", "fontSize": 24, "fontWeight": "bold", "lineHeight": 1.5},
        ),
        DesignToken(name="body_text", type="text", value="400 16px/24px 'Open Sans'"),
        DesignToken(name="space-sm", type="padding", value=8),
        DesignToken(name="space md", type="spacing", value="1rem"),
        DesignToken(name="icon-size", type="dimension", value="24"),
        DesignToken(name="card shadow", type="drop-shadow", value="0 2px 4px rgba(0,0,0,0.5)"),
        DesignToken(name="divider", type="stroke", value="1px solid #e0e0e0"),
        DesignToken(name="disabled", type="alpha", value="50"),
    ]


def raw_collection(**overrides: Any) -> TokenCollection:
    payload: Dict[str, Any] = {
        "name": "Photo App",
        "version": "1.2.3",
        "source": "figma",
        "tokens": raw_tokens(),
    }
    payload.update(overrides)
    return TokenCollection(**payload)


def export_payload() -> Dict[str, Any]:
    """A serialized collection as a design tool export would provide it."""
    return {
        "name": "Photo App",
        "version": "2.0.0",
        "tokens": [
            {"name": "Primary", "type": "color", "value": "#336699"},
            {"name": "Gap", "type": "spacing", "value": 12},
        ],
    }


__all__ = ["export_payload", "raw_collection", "raw_tokens"]
