"""Portable SQL functions"""

from sqlalchemy import String
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.functions import GenericFunction

SQLITE_UNICODE_LOWER = "labflow_lower"


class unicode_lower(GenericFunction):
    """
    lower() that folds non-ASCII letters too.

    PostgreSQL's lower() already does; SQLite's built-in lower() only folds
    A-Z, so on SQLite this compiles to a Python function registered per
    connection by register_sqlite_functions.
    """
    type = String()
    inherit_cache = True


@compiles(unicode_lower)
def _compile_unicode_lower(element, compiler, **kw):
    return f"lower({compiler.process(element.clauses, **kw)})"


@compiles(unicode_lower, "sqlite")
def _compile_unicode_lower_sqlite(element, compiler, **kw):
    return f"{SQLITE_UNICODE_LOWER}({compiler.process(element.clauses, **kw)})"


def _python_lower(value):
    return value.lower() if isinstance(value, str) else value


def register_sqlite_functions(dbapi_conn, connection_record) -> None:
    """Connect-event hook installing the functions above on a SQLite connection"""
    dbapi_conn.create_function(SQLITE_UNICODE_LOWER, 1, _python_lower, deterministic=True)
