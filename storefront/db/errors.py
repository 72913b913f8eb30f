from sqlalchemy.exc import IntegrityError

# SQLSTATE for unique_violation (PostgreSQL and most drivers that expose it)
UNIQUE_VIOLATION = "23505"

_UNIQUE_MARKERS = (
    "UNIQUE constraint failed",  # SQLite
    "duplicate key value",       # PostgreSQL
    "Duplicate entry",           # MySQL
)

def is_unique_violation(exc: Exception) -> bool:
    """Tell a duplicate-key insert apart from every other storage failure."""
    if not isinstance(exc, IntegrityError):
        return False
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    message = str(orig)
    return any(marker in message for marker in _UNIQUE_MARKERS)
