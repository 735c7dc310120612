"""LaTeX resume source to plain text.

An ordered sequence of regex substitutions, not a LaTeX parser. Braced
arguments are matched one level deep only: ``\\textbf{a {b} c}`` is not
unwrapped cleanly.
"""

from __future__ import annotations

import re

BULLET = "•"

_ARG = r"\{([^}]*)\}"

# (pattern, replacement) applied in order
_RULES: list[tuple[re.Pattern[str], str]] = [
    # Comments; an escaped \% is a literal percent sign
    (re.compile(r"(?<!\\)%.*$", re.MULTILINE), ""),
    # Preamble
    (re.compile(r"\\documentclass(\[[^\]]*\])?\{[^}]*\}"), ""),
    (re.compile(r"\\usepackage(\[[^\]]*\])?\{[^}]*\}"), ""),
    (re.compile(r"\\(begin|end)\{document\}"), ""),
    # Headings
    (re.compile(r"\\section\*?" + _ARG), r"\n\n\1\n"),
    (re.compile(r"\\subsection\*?" + _ARG), r"\n\1\n"),
    (re.compile(r"\\subsubsection\*?" + _ARG), r"\n\1\n"),
    # Inline formatting
    (re.compile(r"\\(?:textbf|textit|emph|underline)" + _ARG), r"\1"),
    # Links
    (re.compile(r"\\href\{[^}]*\}" + _ARG), r"\1"),
    (re.compile(r"\\url" + _ARG), r"\1"),
    # Lists
    (re.compile(r"\\(begin|end)\{(itemize|enumerate)\}"), ""),
    (re.compile(r"\\item\s*"), BULLET + " "),
    # Resume template macros
    (re.compile(r"\\resumeItem" + _ARG), BULLET + r" \1"),
    (re.compile(r"\\resumeSubheading" + _ARG * 4), r"\1 - \3\n\2, \4"),
    (re.compile(r"\\resumeProjectHeading" + _ARG * 2), r"\1 - \2"),
    # Anything else that looks like a command
    (re.compile(r"\\[a-zA-Z]+\*?(\[[^\]]*\])?(\{[^}]*\})?"), ""),
    (re.compile(r"[{}\\]"), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
]


def latex_to_text(source: str) -> str:
    """Convert LaTeX source to a plain-text approximation.

    Idempotent on text that contains no LaTeX markup.
    """
    text = source
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text.strip()
