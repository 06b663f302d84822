"""
Naming utilities for safe code generation.

Handles case conversions, English pluralization heuristics, name
sanitization and keyword conflicts across target languages. Every case
conversion is a pure function of its input and idempotent.
"""

import re
from enum import Enum
from typing import Dict, Set


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    KEBAB_CASE = "kebab"  # user-name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME
    FLAT_CASE = "flat"  # username


VOWELS = set("aeiouAEIOU")


def to_snake_case(name: str) -> str:
    """Convert to snake_case."""
    if not name:
        return name
    name = re.sub(r"[-\s]+", "_", name)
    # HTTPServer -> HTTP_Server, userName -> user_Name
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    name = re.sub(r"_+", "_", name.lower())
    return name.strip("_")


def to_pascal_case(name: str) -> str:
    """
    Convert to PascalCase.

    Word boundaries are separators (anything non-alphanumeric); letters inside
    a word keep their case, so an already-Pascal name comes back unchanged.
    SCREAMING_SNAKE input is lower-cased first: USER_NAME -> UserName.
    """
    if not name:
        return name
    parts = [p for p in re.split(r"[^a-zA-Z0-9]+", name) if p]
    if len(parts) > 1 and not any(c.islower() for c in name):
        parts = [p.lower() for p in parts]
    return "".join(part[0].upper() + part[1:] for part in parts)


def to_camel_case(name: str) -> str:
    """Convert to camelCase."""
    pascal = to_pascal_case(name)
    if not pascal:
        return pascal
    return pascal[0].lower() + pascal[1:]


def to_kebab_case(name: str) -> str:
    """Convert to kebab-case."""
    return to_snake_case(name).replace("_", "-")


def convert_case(name: str, target_case: NamingCase) -> str:
    """Convert name to the given case style."""
    if target_case == NamingCase.SNAKE_CASE:
        return to_snake_case(name)
    elif target_case == NamingCase.CAMEL_CASE:
        return to_camel_case(name)
    elif target_case == NamingCase.PASCAL_CASE:
        return to_pascal_case(name)
    elif target_case == NamingCase.KEBAB_CASE:
        return to_kebab_case(name)
    elif target_case == NamingCase.SCREAMING_SNAKE:
        return to_snake_case(name).upper()
    elif target_case == NamingCase.FLAT_CASE:
        return to_snake_case(name).replace("_", "")
    else:
        return name


def pluralize(name: str) -> str:
    """
    Best-effort English plural of a word.

    Rules, in order:
        consonant + "y"          -> "ies"   (category -> categories)
        "s", "x", "ch", "sh"     -> "+es"   (status -> statuses)
        anything else            -> "+s"    (product -> products)

    Irregular plurals are not recognized: "person" becomes "persons" and a
    word that is already plural still gets a suffix ("people" -> "peoples").
    """
    if not name:
        return name
    if name.endswith("y") and len(name) > 1 and name[-2] not in VOWELS:
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "ch", "sh")):
        return name + "es"
    return name + "s"


def singularize(name: str) -> str:
    """
    Best-effort singular of a plural table name.

    categories -> category, addresses -> address, boxes -> box,
    statuses -> status, products -> product, address -> address.
    """
    if not name:
        return name
    lower = name.lower()
    if lower.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if lower.endswith("sses"):
        return name[:-2]
    if lower.endswith(("xes", "ches", "shes")):
        return name[:-2]
    if lower.endswith(("uses", "ases", "ises", "oses")):
        return name[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return name[:-1]
    return name


def strip_id_suffix(column_name: str) -> str:
    """Turn a foreign key column into a property name: category_id -> category."""
    if column_name and column_name.lower().endswith("_id") and len(column_name) > 3:
        return column_name[:-3]
    return column_name


class NameSanitizer:
    """Handles name sanitization and case conversion."""

    def __init__(self, reserved_words: Set[str] = None, builtin_types: Set[str] = None):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
        """
        self.reserved_words = {w.lower() for w in (reserved_words or set())}
        self.builtin_types = {t.lower() for t in (builtin_types or set())}
        self._name_cache: Dict[str, str] = {}

    def sanitize_name(
        self,
        name: str,
        target_case: NamingCase = NamingCase.SNAKE_CASE,
        suffix_on_conflict: str = "_",
    ) -> str:
        """
        Sanitize a name for safe use in target language.

        Sanitizing is deterministic: the same input always yields the same
        identifier, so a table's names thread consistently through every
        artifact generated for it.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for reserved words

        Returns:
            Sanitized name safe for use
        """
        cache_key = f"{name}_{target_case.value}_{suffix_on_conflict}"
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        cleaned = self._clean_basic(name)
        converted = convert_case(cleaned, target_case)
        if converted and converted[0].isdigit():
            converted = f"_{converted}"
        final_name = self._resolve_conflicts(converted, suffix_on_conflict)

        self._name_cache[cache_key] = final_name
        return final_name

    def is_reserved(self, name: str) -> bool:
        lower = name.lower()
        return lower in self.reserved_words or lower in self.builtin_types

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_-]", "_", name)
        cleaned = cleaned.strip("_-")
        if not cleaned:
            cleaned = "field"
        return cleaned

    def _resolve_conflicts(self, name: str, suffix: str) -> str:
        """Resolve conflicts with reserved words and builtin types."""
        if self.is_reserved(name):
            return f"{name}{suffix}"
        return name
