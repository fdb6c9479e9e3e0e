"""
Lexical errors raised when a script ends inside an open construct.
"""

from jrny.domain.errors import JrnyError


class LexError(JrnyError):
    """Base class for scanner failures.

    Attributes:
        construct: Human readable name of the unterminated construct
        line: 1-based line where the construct was opened
        column: 1-based column where the construct was opened
    """

    construct = "construct"
    error_code = "lex_error"

    def __init__(self, line: int, column: int) -> None:
        super().__init__(
            message=f"Unterminated {self.construct} starting at line {line}, column {column}",
            code=self.error_code,
        )
        self.line = line
        self.column = column


class UnterminatedString(LexError):
    """Input ended inside a single-quoted string literal."""

    construct = "string"
    error_code = "unterminated_string"


class UnterminatedQuotedIdentifier(LexError):
    """Input ended inside a double-quoted identifier."""

    construct = "quoted identifier"
    error_code = "unterminated_quoted_identifier"


class UnterminatedBlockComment(LexError):
    """Input ended inside a block comment."""

    construct = "block comment"
    error_code = "unterminated_block_comment"
