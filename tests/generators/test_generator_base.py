from __future__ import annotations

import pytest

from designsync.custom_sections import CustomSectionEngine
from designsync.generators import GENERATORS, AndroidGenerator, WebGenerator, create_generator
from designsync.generators.base import (
    camel_case,
    comment_text,
    hex_channels,
    pascal_case,
    primary_family,
    unique_identifiers,
)


def test_create_generator_dispatches_by_platform() -> None:
    engine = CustomSectionEngine("overwrite")

    generator = create_generator("android", engine)

    assert isinstance(generator, AndroidGenerator)
    assert generator.section_engine is engine
    assert isinstance(create_generator("web"), WebGenerator)
    assert sorted(GENERATORS) == ["android", "ios", "web"]


def test_create_generator_rejects_unknown_platform() -> None:
    with pytest.raises(ValueError, match="flutter"):
        create_generator("flutter")


@pytest.mark.parametrize(
    ("name", "camel", "pascal"),
    [
        ("brand-primary", "brandPrimary", "BrandPrimary"),
        ("space-2xl", "space2xl", "Space2xl"),
        ("---", "token", "Token"),
    ],
)
def test_identifier_casing(name: str, camel: str, pascal: str) -> None:
    assert camel_case(name) == camel
    assert pascal_case(name) == pascal


def test_comment_text_flattens_and_neutralises_terminators() -> None:
    assert comment_text("Line one\n  line two */ end") == "Line one line two * / end"
    assert comment_text(None) == ""


def test_hex_channels() -> None:
    assert hex_channels("#336699") == (0x33, 0x66, 0x99, 255)
    assert hex_channels("#33669980") == (0x33, 0x66, 0x99, 0x80)


def test_unique_identifiers_suffixes_collisions_in_order() -> None:
    names = ["space-1", "space1", "space1-2", "space_1"]

    assert unique_identifiers(names) == {
        "space-1": "space1",
        "space1": "space1_2",
        "space1-2": "space12",
        "space_1": "space1_3",
    }


def test_unique_identifiers_escapes_reserved_words() -> None:
    identifiers = unique_identifiers(["object", "when-ready"], {"object", "when"})

    assert identifiers == {"object": "`object`", "when-ready": "whenReady"}


def test_platform_identifier_escapes_keywords() -> None:
    assert AndroidGenerator().identifier("class") == "`class`"
    assert WebGenerator().identifier("class") == "class"


@pytest.mark.parametrize(
    ("family", "expected"),
    [
        ("Inter", "Inter"),
        ("'Inter', sans-serif", "Inter"),
        ('"Helvetica Neue", Arial', "Helvetica Neue"),
        ("system-ui, -apple-system", "system-ui"),
    ],
)
def test_primary_family(family: str, expected: str) -> None:
    assert primary_family(family) == expected
