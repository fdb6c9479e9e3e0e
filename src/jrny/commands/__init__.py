"""
jrny CLI Commands

Each command lives in its own module; cli.py only routes arguments to them.
"""

from .begin import BeginError, begin_project
from .embark import EmbarkError, EmbarkResult, RevisionLexError, embark
from .plan import PlanError, plan_revision
from .review import ReviewError, ReviewResult, review_revisions
from .split import SplitError, split_file

__all__ = [
    "begin_project",
    "BeginError",
    "plan_revision",
    "PlanError",
    "review_revisions",
    "ReviewResult",
    "ReviewError",
    "embark",
    "EmbarkResult",
    "EmbarkError",
    "RevisionLexError",
    "split_file",
    "SplitError",
]
