"""Athlete identity keys.

The same person shows up once per race they finished. Results are merged
under a key derived from (name, country, gender):

    "José García", "ESP", "Male"  → "jose-garcia--esp-m"

Accented and plain spellings collide on purpose. Two different people with
the same name, country and gender collide too; that is a known limit of
the heuristic, not something to patch here.

Every producer and consumer of keys goes through `derive_identity_key`.
"""

import re
import unicodedata

KEY_SEPARATOR = "--"

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def normalize_name(full_name: str | None) -> str:
    """Lower-case, strip diacritics, collapse non-alphanumerics to '-'."""
    text = unicodedata.normalize("NFD", (full_name or "").lower())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    return _NON_ALNUM_RE.sub("-", text).strip("-")


def derive_identity_key(
    full_name: str | None,
    country_code: str | None,
    gender: str | None,
) -> str:
    """Deterministic key for an athlete. Never raises; blanks give a blank-ish key."""
    country = (country_code or "").lower()
    gender_initial = (gender or "")[:1].lower()
    return f"{normalize_name(full_name)}{KEY_SEPARATOR}{country}-{gender_initial}"
