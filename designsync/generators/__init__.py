"""Platform generators keyed by target platform id."""

from __future__ import annotations

from typing import Dict, Type

from ..custom_sections import CustomSectionEngine
from .android import AndroidGenerator
from .base import ArtifactSpec, PlatformConfig, PlatformGenerator
from .ios import IOSGenerator
from .web import WEB_TEMPLATES, WebGenerator

GENERATORS: Dict[str, Type[PlatformGenerator]] = {
    "android": AndroidGenerator,
    "ios": IOSGenerator,
    "web": WebGenerator,
}


def create_generator(
    platform: str, section_engine: CustomSectionEngine | None = None
) -> PlatformGenerator:
    try:
        generator_cls = GENERATORS[platform]
    except KeyError as exc:
        raise ValueError(f"Unsupported target platform: {platform}") from exc
    return generator_cls(section_engine)


__all__ = [
    "AndroidGenerator",
    "ArtifactSpec",
    "GENERATORS",
    "IOSGenerator",
    "PlatformConfig",
    "PlatformGenerator",
    "WEB_TEMPLATES",
    "WebGenerator",
    "create_generator",
]
