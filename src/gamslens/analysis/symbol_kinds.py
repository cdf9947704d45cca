"""Cosmetic symbol kinds for outline nodes.

Values are LSP ``SymbolKind`` member names. Nothing structural depends on this
table; category collapse lives in ``keywords.canonical_category``.
"""

from __future__ import annotations

from enum import StrEnum

from gamslens.analysis.keywords import DeclarationCategory


class PresentationKind(StrEnum):
    ARRAY = "Array"
    TYPE_PARAMETER = "TypeParameter"
    VARIABLE = "Variable"
    FUNCTION = "Function"
    CLASS = "Class"
    ENUM = "Enum"
    FILE = "File"
    KEY = "Key"
    NAMESPACE = "Namespace"


_KIND_BY_CATEGORY: dict[DeclarationCategory, PresentationKind] = {
    DeclarationCategory.SET: PresentationKind.ARRAY,
    DeclarationCategory.PARAMETER: PresentationKind.TYPE_PARAMETER,
    DeclarationCategory.VARIABLE: PresentationKind.VARIABLE,
    DeclarationCategory.EQUATION: PresentationKind.FUNCTION,
    DeclarationCategory.MODEL: PresentationKind.CLASS,
    DeclarationCategory.ACRONYM: PresentationKind.ENUM,
    DeclarationCategory.FILE: PresentationKind.FILE,
    DeclarationCategory.FUNCTION: PresentationKind.FUNCTION,
}

SECTION_KIND = PresentationKind.NAMESPACE


def presentation_kind(category: DeclarationCategory | str | None) -> PresentationKind:
    if category is None:
        return PresentationKind.KEY
    try:
        key = DeclarationCategory(str(category).upper())
    except ValueError:
        return PresentationKind.KEY
    return _KIND_BY_CATEGORY.get(key, PresentationKind.KEY)
