# Vault Linter
# Copyright (C) 2025 Phoenix Link (Pty) Ltd.
#
# This file is part of Vault Linter.
#
# Vault Linter is free software: you can redistribute it and/or modify it
# under the terms of the GNU Affero General Public License v3.0 (AGPL-3.0).
# See https://www.gnu.org/licenses/agpl-3.0.html for the full text.
"""
Vault Linter -- Locale Resolution

Picks the locale handed to rules through ``LintContext``. The host app
language maps to a default locale; a more specific system locale wins when
it shares the language; an explicit ``linterLocale`` override wins over
both. Unknown identifiers fall back to ``DEFAULT_LOCALE``.
"""

from __future__ import annotations

import locale as _system_locale
import logging

logger = logging.getLogger("vaultlint.core.locale")

SYSTEM_DEFAULT = "system-default"
DEFAULT_LOCALE = "en"

# Host UI language -> locale identifier
LANG_TO_LOCALE: dict[str, str] = {
    "en": "en-gb",
    "zh": "zh-cn",
    "zh-TW": "zh-tw",
    "ru": "ru",
    "ko": "ko",
    "it": "it",
    "id": "id",
    "ro": "ro",
    "pt-BR": "pt-br",
    "cz": "cs",
    "da": "da",
    "de": "de",
    "es": "es",
    "fr": "fr",
    "no": "nn",
    "pl": "pl",
    "pt": "pt",
    "tr": "tr",
    "hi": "hi",
    "nl": "nl",
    "ar": "ar",
    "ja": "ja",
}

# Locales the formatting layer knows about
KNOWN_LOCALES: frozenset[str] = frozenset(
    {
        "en",
        "en-au",
        "en-ca",
        "en-gb",
        "en-ie",
        "en-nz",
        "en-us",
        *LANG_TO_LOCALE.values(),
        "de-at",
        "de-ch",
        "es-mx",
        "es-us",
        "fr-ca",
        "fr-ch",
        "nb",
        "sv",
        "fi",
        "uk",
    }
)


def system_language() -> str | None:
    """Best-effort system locale as a lower-case BCP 47 tag (``en-us``)."""
    try:
        tag = _system_locale.getlocale()[0]
    except ValueError:
        return None
    if not tag:
        return None
    return tag.split(".")[0].replace("_", "-").lower()


def normalize_locale(identifier: str) -> str:
    return identifier.strip().replace("_", "-").lower()


def resolve_locale(
    override: str = SYSTEM_DEFAULT,
    app_language: str = "en",
    system_lang: str | None = None,
) -> str:
    """
    Resolve the locale used for a lint run.

    Priority:
      1. explicit override (anything but ``system-default``)
      2. system locale, when it is a more specific form of the app language
      3. the app language's default locale
      4. DEFAULT_LOCALE
    """
    resolved = LANG_TO_LOCALE.get(app_language)

    if override and override != SYSTEM_DEFAULT:
        resolved = override
    elif system_lang and system_lang.startswith(app_language.lower()):
        resolved = system_lang

    if not resolved:
        return DEFAULT_LOCALE

    candidate = normalize_locale(resolved)
    if candidate in KNOWN_LOCALES:
        return candidate
    # Fall back from "de-li" to "de" before giving up
    language = candidate.split("-")[0]
    if language in KNOWN_LOCALES:
        logger.debug("Locale %s unknown, using %s", candidate, language)
        return language
    logger.debug("Locale %s unknown, using %s", candidate, DEFAULT_LOCALE)
    return DEFAULT_LOCALE
