"""Dialect-specific SQL and parameter adaptation, and hand-off to SQLAlchemy."""

import re
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy import Boolean, Date, DateTime, Float, Integer, String, bindparam, text
from sqlalchemy.sql.elements import TextClause
from sqlalchemy.types import TypeEngine

from .mappings import token_prefix

sa_types = {
    'int': Integer, 'integer': Integer,
    'float': Float, 'double': Float,
    'bool': Boolean, 'boolean': Boolean,
    'str': String, 'string': String,
    'datetime': DateTime, 'date': Date,
}

_rx_limit = re.compile(r'\bLIMIT (\d+), (-?\d+)')


def _token_rx(bindings: Dict[str, Any]) -> Optional[re.Pattern]:
    """Regex matching any bound token, longest first so ':abcd' never eats ':abcdef'."""
    if not bindings:
        return None
    tokens = sorted(bindings, key=len, reverse=True)
    return re.compile('(?:' + '|'.join(re.escape(t) for t in tokens) + r')(?![A-Za-z])')


def _name(token: str) -> str:
    return token[len(token_prefix):] if token.startswith(token_prefix) else token


def used_tokens(sql: str, bindings: Dict[str, Any]) -> List[str]:
    """Tokens of bindings that appear in sql, in order of appearance."""
    rx = _token_rx(bindings)
    return rx.findall(sql) if rx else []


def adapt_sql(sql: str, bindings: Dict[str, Any], dialect: str) -> Tuple[str, Union[Dict[str, Any], List[Any]]]:
    """Rewrite bound tokens to the dialect's paramstyle and return (sql, params)."""
    d = dialect.lower()
    rx = _token_rx(bindings)
    order = rx.findall(sql) if rx else []
    if d in ('default', 'oracle'):
        return sql, {_name(t): bindings[t] for t in order}
    sql = _rx_limit.sub(r'LIMIT \1 OFFSET \2', sql)
    if d == 'mssql':
        sql = rx.sub(lambda m: '@' + _name(m.group(0)), sql) if rx else sql
        return sql, {_name(t): bindings[t] for t in order}
    if d in ('postgres', 'postgresql'):
        # pyformat needs literal percent signs doubled
        sql = sql.replace('%', '%%')
        sql = rx.sub(lambda m: f'%({_name(m.group(0))})s', sql) if rx else sql
        return sql, {_name(t): bindings[t] for t in order}
    if d in ('mysql', 'sqlite'):
        sql = rx.sub('?', sql) if rx else sql
        return sql, [bindings[t] for t in order]
    raise ValueError(f'Unknown dialect: {d}')


def to_text_clause(sql: str, bindings: Dict[str, Any], types: Optional[Dict[str, Any]] = None) -> TextClause:
    """Wrap built SQL in a SQLAlchemy text() with one bindparam per token it uses."""
    types = types or {}
    params = []
    for token in dict.fromkeys(used_tokens(sql, bindings)):
        declared = types.get(token)
        if isinstance(declared, str):
            declared = sa_types.get(declared.lower())
        if declared is not None and not (isinstance(declared, TypeEngine)
                                         or (isinstance(declared, type) and issubclass(declared, TypeEngine))):
            declared = None
        params.append(bindparam(_name(token), bindings[token], type_=declared))
    return text(sql).bindparams(*params)


def adapt_types(sql: str, bindings: Dict[str, Any], types: Optional[Dict[str, Any]],
                dialect: str) -> Union[Dict[str, Any], List[Any]]:
    """Declared bind types shaped like adapt_sql's params: by name, or by position for '?' dialects."""
    types = types or {}
    order = used_tokens(sql, bindings)
    if dialect.lower() in ('mysql', 'sqlite'):
        return [types.get(t) for t in order]
    return {_name(t): types[t] for t in order if t in types}
