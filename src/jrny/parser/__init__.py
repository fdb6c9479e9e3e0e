"""
SQL Script Parsing

Comment- and quote-aware splitting of revision scripts into statements.
"""

from .errors import (
    LexError,
    UnterminatedBlockComment,
    UnterminatedQuotedIdentifier,
    UnterminatedString,
)
from .statements import DELIMITER, Statement, StatementScanner, split_statements
from .states import Disposition, LexState, transition

__all__ = [
    "DELIMITER",
    "Disposition",
    "LexState",
    "LexError",
    "Statement",
    "StatementScanner",
    "UnterminatedBlockComment",
    "UnterminatedQuotedIdentifier",
    "UnterminatedString",
    "split_statements",
    "transition",
]
