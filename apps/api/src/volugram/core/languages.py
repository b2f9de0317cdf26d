"""
Supported Languages

Certificates, score labels and notification emails exist in exactly four
languages. Unknown codes are rejected instead of falling back to English.
"""

import enum

from volugram.core.errors import UnsupportedLocaleError


class Language(str, enum.Enum):
    """Language codes accepted across the API."""

    EN = "en"
    DE = "de"
    ET = "et"
    NO = "no"


DEFAULT_LANGUAGE = Language.EN


def resolve_language(value: "Language | str | None") -> Language:
    """
    Resolve a language code to a Language member.

    Args:
        value: A Language member or its string code

    Returns:
        The matching Language

    Raises:
        UnsupportedLocaleError: If the code is not one of en, de, et, no
    """
    if isinstance(value, Language):
        return value
    try:
        return Language(value)
    except ValueError as e:
        raise UnsupportedLocaleError(value) from e
