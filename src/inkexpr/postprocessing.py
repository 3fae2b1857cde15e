"""Post-processing for raw recognizer output.

Rewrites whatever the engine read into a best-effort arithmetic expression.
Nothing here parses or evaluates the result; the evaluator downstream owns
syntax errors.

Correction steps (order matters)
--------------------------------
1. Drop all whitespace.
2. Character confusions: letters and punctuation the recognizer emits for
   hand-drawn digits and operators, e.g. ``O`` → ``0``, ``l`` → ``1``,
   ``x`` → ``*``, ``:`` → ``/``.  The table is plain data
   (``DEFAULT_SUBSTITUTIONS``) and is applied in a single pass, so a
   replacement is never itself replaced.
3. A trailing ``=`` is dropped: ``12+7=`` is read as ``12+7``.
4. Stray closing parentheses: if there is a ``)`` but no ``(`` anywhere,
   every ``)`` is taken to be a misread ``2``.

Characters outside the table pass through untouched.
"""

import logging
from typing import Iterable, Optional

from inkexpr.config import DEFAULT_SUBSTITUTIONS

logger = logging.getLogger(__name__)


# ── Helpers ────────────────────────────────────────────────────────────────────


def apply_substitutions(text: str, table: Iterable[tuple[str, str]]) -> str:
    """Replace each character of *text* found in *table*, left to right.

    When a character appears in more than one pair the first pair wins.
    """
    mapping: dict[str, str] = {}
    for misread, replacement in table:
        mapping.setdefault(misread, replacement)
    return "".join(mapping.get(ch, ch) for ch in text)


def _strip_trailing_equals(text: str) -> str:
    return text[:-1] if text.endswith("=") else text


def _repair_unopened_parens(text: str) -> str:
    # No inverse for "(" without ")"; an unmatched opener is left alone.
    if ")" in text and "(" not in text:
        return text.replace(")", "2")
    return text


# ── Public API ─────────────────────────────────────────────────────────────────


def normalize_expression(
    raw_text: Optional[str],
    substitutions: Iterable[tuple[str, str]] = DEFAULT_SUBSTITUTIONS,
) -> str:
    """Run the full correction pipeline and return the expression.

    ``None`` and blank input both give ``""``; the result is never ``None``.
    """
    if raw_text is None:
        return ""

    text = "".join(raw_text.split())
    text = apply_substitutions(text, substitutions)
    text = _strip_trailing_equals(text)
    text = _repair_unopened_parens(text)

    if text != raw_text:
        logger.debug("Normalized %r -> %r", raw_text, text)
    return text
