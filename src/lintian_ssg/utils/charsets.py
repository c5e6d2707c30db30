"""Character sets for O(1) classification.

All sets are frozensets so membership tests are constant time and the
module-level constants can be shared across threads.

Usage:
    from lintian_ssg.utils.charsets import ASCII_PUNCTUATION

    if char in ASCII_PUNCTUATION:
        ...
"""

# Characters that a backslash may escape, and that trigger inline parsers
ASCII_PUNCTUATION: frozenset[str] = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

# ASCII whitespace, including the line terminators
WHITESPACE: frozenset[str] = frozenset(" \t\n\r\f\v")

# Spaces allowed as indentation
INDENT_CHARS: frozenset[str] = frozenset(" \t")

DIGITS: frozenset[str] = frozenset("0123456789")

# List marker characters
BULLET_LIST_MARKERS: frozenset[str] = frozenset("-*+")
ORDERED_LIST_DELIMITERS: frozenset[str] = frozenset(".)")

# Thematic break characters
THEMATIC_BREAK_CHARS: frozenset[str] = frozenset("-*_")

# Valid fence characters
FENCE_CHARS: frozenset[str] = frozenset("`~")
