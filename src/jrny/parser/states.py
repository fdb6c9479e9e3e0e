"""
Lexical States

Quote- and comment-aware context tracking for SQL scripts. The transition
function is pure: it maps the current state and a lookahead key to what the
driver should do with the key and which state comes next. It owns no buffers
and knows nothing about statement boundaries.
"""

from enum import Enum

LINE_COMMENT_OPEN = "--"
BLOCK_COMMENT_OPEN = "/*"
BLOCK_COMMENT_CLOSE = "*/"

TOKENS = frozenset({LINE_COMMENT_OPEN, BLOCK_COMMENT_OPEN, BLOCK_COMMENT_CLOSE})

# Matches any key not listed explicitly for a state
OTHER = "<other>"


class Disposition(Enum):
    """What the driver does with the current lookahead key."""

    DROP = "drop"
    EMIT = "emit"
    HOLD = "hold"


class LexState(Enum):
    """Lexical context of the scanner."""

    START = "start"
    IN_STRING = "in_string"
    IN_QUOTED_IDENTIFIER = "in_quoted_identifier"
    MAYBE_LINE_COMMENT = "maybe_line_comment"
    IN_LINE_COMMENT = "in_line_comment"
    MAYBE_BLOCK_COMMENT = "maybe_block_comment"
    IN_BLOCK_COMMENT = "in_block_comment"
    MAYBE_END_BLOCK_COMMENT = "maybe_end_block_comment"

    @property
    def can_terminate(self) -> bool:
        """Whether input may end cleanly while in this state."""
        return self in _TERMINABLE


_TERMINABLE = frozenset(
    {LexState.START, LexState.MAYBE_LINE_COMMENT, LexState.MAYBE_BLOCK_COMMENT}
)

_E, _D, _H = Disposition.EMIT, Disposition.DROP, Disposition.HOLD
_S = LexState

TRANSITIONS: dict[LexState, dict[str, tuple[Disposition, LexState]]] = {
    _S.START: {
        "'": (_E, _S.IN_STRING),
        '"': (_E, _S.IN_QUOTED_IDENTIFIER),
        "-": (_H, _S.MAYBE_LINE_COMMENT),
        "/": (_H, _S.MAYBE_BLOCK_COMMENT),
        OTHER: (_E, _S.START),
    },
    _S.IN_STRING: {
        "'": (_E, _S.START),
        OTHER: (_E, _S.IN_STRING),
    },
    _S.IN_QUOTED_IDENTIFIER: {
        '"': (_E, _S.START),
        OTHER: (_E, _S.IN_QUOTED_IDENTIFIER),
    },
    _S.MAYBE_LINE_COMMENT: {
        "'": (_E, _S.IN_STRING),
        '"': (_E, _S.IN_QUOTED_IDENTIFIER),
        LINE_COMMENT_OPEN: (_D, _S.IN_LINE_COMMENT),
        "/": (_H, _S.MAYBE_BLOCK_COMMENT),
        OTHER: (_E, _S.START),
    },
    _S.IN_LINE_COMMENT: {
        "\n": (_E, _S.START),
        OTHER: (_D, _S.IN_LINE_COMMENT),
    },
    _S.MAYBE_BLOCK_COMMENT: {
        "'": (_E, _S.IN_STRING),
        '"': (_E, _S.IN_QUOTED_IDENTIFIER),
        # The held slash is literal text; the dash starts a new candidate.
        "-": (_H, _S.MAYBE_LINE_COMMENT),
        BLOCK_COMMENT_OPEN: (_D, _S.IN_BLOCK_COMMENT),
        OTHER: (_E, _S.START),
    },
    _S.IN_BLOCK_COMMENT: {
        "*": (_H, _S.MAYBE_END_BLOCK_COMMENT),
        OTHER: (_D, _S.IN_BLOCK_COMMENT),
    },
    _S.MAYBE_END_BLOCK_COMMENT: {
        BLOCK_COMMENT_CLOSE: (_D, _S.START),
        "*": (_H, _S.MAYBE_END_BLOCK_COMMENT),
        OTHER: (_D, _S.IN_BLOCK_COMMENT),
    },
}


def classify(key: str, last: str) -> str:
    """Return the table entry a lookahead key matches.

    Two-grapheme tokens match on the whole key, everything else on the newest
    grapheme (``last``).
    """
    if key in TOKENS:
        return key
    if last.endswith("\n"):
        # a CRLF cluster closes a line comment like a bare newline
        return "\n"
    return last


def transition(
    state: LexState, key: str, last: str | None = None
) -> tuple[Disposition, LexState]:
    """Look up the disposition and next state for a lookahead key.

    Args:
        state: Current lexical state
        key: Lookahead key (one grapheme, or held grapheme + newest grapheme)
        last: Newest grapheme of the key; defaults to the final code point
            of ``key``, which is exact for single code point graphemes

    Returns:
        (disposition, next_state)
    """
    table = TRANSITIONS[state]
    entry = classify(key, key[-1:] if last is None else last)
    if entry in table:
        return table[entry]
    return table[OTHER]
