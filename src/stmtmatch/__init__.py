"""stmtmatch: semantic comparison of expected and retrieved learning-record statements."""

__version__ = "0.3.0"

from .compare import (  # noqa: E402
    ComparisonResult,
    assert_statement_match,
    assert_statement_no_match,
    compare_statements,
)
from .errors import (  # noqa: E402
    StatementMismatchError,
    StmtMatchError,
    TimestampMismatchError,
    UnexpectedMatchError,
)
from .normalize import FULL, MEANING_ONLY, ComparisonConfig, normalize  # noqa: E402

__all__ = [
    "__version__",
    "ComparisonConfig",
    "ComparisonResult",
    "FULL",
    "MEANING_ONLY",
    "StatementMismatchError",
    "StmtMatchError",
    "TimestampMismatchError",
    "UnexpectedMatchError",
    "assert_statement_match",
    "assert_statement_no_match",
    "compare_statements",
    "normalize",
]
