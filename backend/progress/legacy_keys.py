"""
Decoder for the legacy publication object names.

Older uploads packed their metadata into the storage key:

    publication-{title}-{venue}-{validated|unvalidated}.{ext}

with spaces replaced by "-" and the result URI-encoded. Prefix, validation
state and extension decode reliably. Title and venue do not: both may contain
hyphens and spaces became hyphens too, so the middle part is kept as one
label and never split.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote

PREFIX = "publication-"
_STATES = (("-unvalidated", False), ("-validated", True))


@dataclass(frozen=True)
class LegacyPublicationKey:
    key: str
    label: str
    validated: bool
    extension: str


def decode(key: str) -> Optional[LegacyPublicationKey]:
    """Return the decoded key or None when `key` is not a legacy publication name."""
    name = unquote(key.rsplit("/", 1)[-1])
    if not name.startswith(PREFIX):
        return None
    stem, dot, ext = name.rpartition(".")
    if not dot:
        stem, ext = name, ""
    for suffix, validated in _STATES:
        if stem.endswith(suffix):
            middle = stem[len(PREFIX):-len(suffix)]
            break
    else:
        return None
    label = " ".join(middle.replace("-", " ").split())
    if not label:
        return None
    return LegacyPublicationKey(key=key, label=label, validated=validated, extension=ext.lower())


__all__ = ["LegacyPublicationKey", "decode", "PREFIX"]
