"""Resource limit constants for comprehension expansion."""

DEFAULT_MAX_NESTING_DEPTH = 64
"""Maximum number of nested closures (binds plus guards) in one expansion."""

DEFAULT_MAX_OUTPUT_LENGTH = 1_000_000
"""Maximum generated expression length in characters."""
