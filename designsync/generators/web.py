"""Web stylesheet generator with CSS, SCSS and Tailwind sub-templates."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, Mapping, Sequence

from ..normalization.values import format_number
from .base import ArtifactSpec, PlatformConfig, PlatformGenerator

WEB_TEMPLATES = ("css", "scss", "tailwind")

_TOKEN_TYPES_THEME = ("color", "typography", "spacing", "sizing", "shadow", "border", "opacity")

_LAYOUTS: Dict[str, Dict[str, str]] = {
    "css": {
        "colors": "colors.css",
        "typography": "typography.css",
        "spacing": "spacing.css",
        "theme": "theme.css",
        "convention": "css",
    },
    "scss": {
        "colors": "_colors.scss",
        "typography": "_typography.scss",
        "spacing": "_spacing.scss",
        "theme": "_theme.scss",
        "convention": "scss",
    },
    "tailwind": {
        "colors": "colors.js",
        "typography": "typography.js",
        "spacing": "spacing.js",
        "theme": "tailwind.tokens.js",
        "convention": "javascript",
    },
}


def css_var(name: str) -> str:
    return f"--{name}"


def scss_var(name: str) -> str:
    return f"${name}"


def font_family_value(family: str) -> str:
    text = family.strip()
    if " " in text and not text.startswith(("'", '"')) and "," not in text:
        return f'"{text}"'
    return text


def shadow_value(value: Mapping[str, str]) -> str:
    return " ".join(
        (value["offsetX"], value["offsetY"], value["blur"], value["spread"], value["color"])
    )


def border_value(value: Mapping[str, str]) -> str:
    return f"{value['width']} {value['style']} {value['color']}"


def number_value(value: Any) -> str:
    return format_number(float(value))


def js_string(value: Any) -> str:
    return json.dumps(str(value))


class WebGenerator(PlatformGenerator):
    """Emits stylesheet artifacts using the configured sub-template."""

    platform = "web"

    def artifacts(self, config: PlatformConfig) -> Sequence[ArtifactSpec]:
        template = self._template_name(config)
        layout = _LAYOUTS[template]
        convention = layout["convention"]
        return (
            ArtifactSpec("colors", layout["colors"], f"{template}/colors.j2", ("color",), convention),
            ArtifactSpec(
                "typography", layout["typography"], f"{template}/typography.j2", ("typography",), convention
            ),
            ArtifactSpec(
                "spacing", layout["spacing"], f"{template}/spacing.j2", ("spacing", "sizing"), convention
            ),
            ArtifactSpec("theme", layout["theme"], f"{template}/theme.j2", _TOKEN_TYPES_THEME, convention),
        )

    def filters(self) -> Dict[str, Callable[..., Any]]:
        return {
            "css_var": css_var,
            "scss_var": scss_var,
            "font_family": font_family_value,
            "shadow": shadow_value,
            "border": border_value,
            "number": number_value,
            "js_string": js_string,
        }

    def describe(self, config: PlatformConfig) -> Dict[str, Any]:
        return {"web_template": self._template_name(config)}

    @staticmethod
    def _template_name(config: PlatformConfig) -> str:
        template = (config.web_template or "css").lower()
        if template not in WEB_TEMPLATES:
            raise ValueError(
                f"Unknown web template {config.web_template!r}; expected one of {', '.join(WEB_TEMPLATES)}"
            )
        return template


__all__ = ["WEB_TEMPLATES", "WebGenerator", "border_value", "css_var", "shadow_value"]
