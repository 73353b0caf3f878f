"""
Canonical job identifiers.

Job/order numbers reach the store from several exports that disagree on
formatting: padded with spaces, lower-cased, with dashes or slashes, or as
a spreadsheet float ("100575126.0"). Two raw values refer to the same job
when they normalize to the same canonical id.
"""

from typing import Any, Union
import re

_SEPARATORS = re.compile(r"[^0-9A-Z]")
_FLOAT_ARTIFACT = re.compile(r"^(\d+)\.0+$")


class UnmatchedId:
    """
    Canonical id of an empty or missing identifier.

    Compares unequal to everything, itself included, so rows without an
    identifier never link to each other.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __eq__(self, other) -> bool:
        return False

    def __ne__(self, other) -> bool:
        return True

    def __hash__(self) -> int:
        return id(self)

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNMATCHED"


UNMATCHED = UnmatchedId()

CanonicalId = Union[str, UnmatchedId]


class IdentifierMatcher:
    """Normalize loosely-typed job/order identifiers into one canonical key"""

    def normalize(self, raw_value: Any) -> CanonicalId:
        """
        Trim, upper-case and strip separators from an identifier.

        Returns:
            Canonical id string, or UNMATCHED for empty/absent input
        """
        if raw_value is None or raw_value is UNMATCHED:
            return UNMATCHED

        if isinstance(raw_value, float):
            if raw_value != raw_value:  # NaN from a blank spreadsheet cell
                return UNMATCHED
            if raw_value.is_integer():
                raw_value = int(raw_value)

        text = str(raw_value).strip()
        float_artifact = _FLOAT_ARTIFACT.match(text)
        if float_artifact:
            text = float_artifact.group(1)

        canonical = _SEPARATORS.sub("", text.upper())
        if not canonical:
            return UNMATCHED
        return canonical

    def matches(self, a: Any, b: Any) -> bool:
        """
        True when both values normalize to the same canonical id.

        Reflexive for every matchable value; values that normalize to
        UNMATCHED (None, blanks, NaN) match nothing, themselves included, so
        two unlinked rows are never joined through an empty id.
        """
        canonical_a = self.normalize(a)
        if canonical_a is UNMATCHED:
            return False
        return canonical_a == self.normalize(b)

    def is_unmatched(self, raw_value: Any) -> bool:
        return self.normalize(raw_value) is UNMATCHED
