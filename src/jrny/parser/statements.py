"""
Statement Scanner

Drives the lexical state machine over a SQL script and partitions it into
independently executable statements. Comment text is stripped; string literals
and quoted identifiers are passed through untouched.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .errors import (
    LexError,
    UnterminatedBlockComment,
    UnterminatedQuotedIdentifier,
    UnterminatedString,
)
from .states import Disposition, LexState, transition

DELIMITER = ";"

_UNTERMINATED: dict[LexState, type[LexError]] = {
    LexState.IN_STRING: UnterminatedString,
    LexState.IN_QUOTED_IDENTIFIER: UnterminatedQuotedIdentifier,
    LexState.IN_BLOCK_COMMENT: UnterminatedBlockComment,
    LexState.MAYBE_END_BLOCK_COMMENT: UnterminatedBlockComment,
}


@dataclass(frozen=True, slots=True)
class Statement:
    """One comment-free statement, delimiter included.

    Attributes:
        text: Statement text stripped of surrounding whitespace
        line: 1-based source line where the statement text begins
    """

    text: str
    line: int

    def __str__(self) -> str:
        return self.text


class StatementScanner:
    """Accumulates statements from a grapheme feed.

    The scanner holds at most one pending grapheme. When a hold is issued while
    another grapheme is already pending, the older one is resolved at once:
    emitted if the holding state is terminable (live SQL), dropped otherwise
    (comment text). The same rule settles a pending grapheme at end of input.
    """

    def __init__(self, delimiter: str = DELIMITER) -> None:
        self.delimiter = delimiter
        self.state = LexState.START
        self._held: str | None = None
        self._held_at = (1, 0)
        self._buffer: list[str] = []
        self._buffer_line: int | None = None
        self._statements: list[Statement] = []
        self._line = 1
        self._column = 0
        self._after_newline = False
        self._opened_at = (1, 0)

    def feed(self, grapheme: str) -> None:
        """Consume the next grapheme of the script."""
        position = self._advance(grapheme)

        if self._held is None:
            key, key_at = grapheme, position
        else:
            key, key_at = self._held + grapheme, self._held_at

        disposition, next_state = transition(self.state, key, grapheme)
        self._track_opening(next_state, position, key_at)

        if disposition is Disposition.HOLD:
            if self._held is not None:
                self._resolve_held()
            self._held, self._held_at = grapheme, position
        else:
            self._held = None
            if disposition is Disposition.EMIT:
                self._emit(key, key_at[0])

        self.state = next_state

        if (
            disposition is Disposition.EMIT
            and next_state is LexState.START
            and key.endswith(self.delimiter)
        ):
            self._flush()

    def finish(self) -> list[Statement]:
        """Signal end of input and return the completed statements.

        Raises:
            LexError: If the script ends inside a string, quoted identifier
                or block comment. No statements are returned in that case.
        """
        if self._held is not None and self.state.can_terminate:
            self._resolve_held()
            self._held = None

        if self.state is LexState.IN_LINE_COMMENT:
            self.state = LexState.START

        if not self.state.can_terminate:
            line, column = self._opened_at
            raise _UNTERMINATED[self.state](line, column)

        self._flush()
        return list(self._statements)

    def _advance(self, grapheme: str) -> tuple[int, int]:
        if self._after_newline:
            self._line += 1
            self._column = 1
        else:
            self._column += 1
        self._after_newline = grapheme.endswith("\n")
        return (self._line, self._column)

    def _track_opening(
        self, next_state: LexState, position: tuple[int, int], key_at: tuple[int, int]
    ) -> None:
        """Remember where a string, identifier or block comment was opened."""
        if next_state is self.state:
            return
        if next_state in (LexState.IN_STRING, LexState.IN_QUOTED_IDENTIFIER):
            self._opened_at = position
        elif (
            self.state is LexState.MAYBE_BLOCK_COMMENT
            and next_state is LexState.IN_BLOCK_COMMENT
        ):
            self._opened_at = key_at

    def _resolve_held(self) -> None:
        if self._held is not None and self.state.can_terminate:
            self._emit(self._held, self._held_at[0])

    def _emit(self, text: str, line: int) -> None:
        if self._buffer_line is None and text.strip():
            self._buffer_line = line
        self._buffer.append(text)

    def _flush(self) -> None:
        text = "".join(self._buffer).strip()
        if text and text != self.delimiter:
            self._statements.append(Statement(text=text, line=self._buffer_line or self._line))
        self._buffer = []
        self._buffer_line = None


def split_statements(source: Iterable[str], delimiter: str = DELIMITER) -> list[Statement]:
    """Split a SQL script into statements.

    Args:
        source: Script text, or any ordered iterable of graphemes. A ``"\r\n"``
            cluster closes a line comment like ``"\n"``
        delimiter: Statement delimiter honoured outside literals and comments

    Returns:
        Statements in source order

    Raises:
        LexError: If the script ends inside an unterminated construct
    """
    scanner = StatementScanner(delimiter=delimiter)
    for grapheme in source:
        scanner.feed(grapheme)
    return scanner.finish()
