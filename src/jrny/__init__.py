"""
jrny

PostgreSQL schema revisions made simple - just add SQL!
"""

__version__ = "0.1.0"

from .core.config import CONF, ENV, ENV_EX, Config, Environment
from .domain.errors import JrnyError
from .parser import LexError, Statement, split_statements

__all__ = [
    "__version__",
    "CONF",
    "ENV",
    "ENV_EX",
    "Config",
    "Environment",
    "JrnyError",
    "LexError",
    "Statement",
    "split_statements",
]
