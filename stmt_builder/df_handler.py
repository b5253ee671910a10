"""DataFrame-based statement generation."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from .adapt_sql import adapt_sql, adapt_types
from .mappings import dtype_bind_types
from .query_builder import StatementBuilder

logger = logging.getLogger(__name__)


def _records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Rows as plain Python dicts with NA/NaN/NaT turned into None."""
    return df.astype(object).where(df.notna(), None).to_dict('records')


def _check(df: Any) -> None:
    if not isinstance(df, pd.DataFrame):
        raise TypeError('Input must be a pandas DataFrame')


def bind_types(df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> List[str]:
    """Bind type per column, from the column dtype."""
    cols = list(columns) if columns is not None else list(df.columns)
    return [dtype_bind_types.get(str(df[c].dtype), 'str') for c in cols]


def df_insert(df: pd.DataFrame, table: str, dialect: str = 'default',
              columns: Optional[Sequence[str]] = None) -> Optional[Tuple[str, Any, Any]]:
    """One multi-row INSERT for the whole frame as (sql, params, types); None for an empty frame."""
    _check(df)
    if df.empty:
        return None
    cols = list(columns) if columns is not None else [str(c) for c in df.columns]
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f'Columns not in DataFrame: {missing}')
    types = bind_types(df, cols)
    builder = StatementBuilder(dialect=dialect).insert(table).fieldnames(cols)
    for row in _records(df[cols]):
        builder.values([row[c] for c in cols], types)
    logger.debug(f'Built {len(df)}-row insert for {table}')
    sql = builder.build()
    adapted, params = adapt_sql(sql, builder.get_bindings(), dialect)
    return adapted, params, adapt_types(sql, builder.get_bindings(), builder.get_binding_types(), dialect)


def df_sql(df: pd.DataFrame, table: str, key_columns: Sequence[str], dialect: str = 'default',
           ops: Sequence[str] = ('select', 'update', 'delete')) -> List[Tuple[Tuple[str, Any], ...]]:
    """Per-row SELECT/UPDATE/DELETE statements keyed on key_columns."""
    _check(df)
    if df.empty:
        return []
    if not key_columns:
        raise ValueError('key_columns is required')
    missing = [c for c in key_columns if c not in df.columns]
    if missing:
        raise ValueError(f'Key columns not in DataFrame: {missing}')
    unknown = [op for op in ops if op not in ('select', 'update', 'delete')]
    if unknown:
        raise ValueError(f'Unsupported ops: {unknown}')
    data_cols = [c for c in df.columns if c not in key_columns]
    out = []
    for row in _records(df):
        row_ops = []
        for op in ops:
            builder = StatementBuilder(dialect=dialect)
            if op == 'select':
                builder.select('*').from_(table)
            elif op == 'update':
                if not data_cols:
                    logger.warning(f'No non-key columns to update in {table}; skipping update')
                    continue
                builder.update(table).set({c: row[c] for c in data_cols})
            else:
                builder.delete(table)
            for k in key_columns:
                builder.where(k, '=', row[k])
            sql = builder.build()
            if sql is None:
                logger.warning(f'Skipping {op} for row {row}: nothing to build')
                continue
            row_ops.append(adapt_sql(sql, builder.get_bindings(), dialect))
        out.append(tuple(row_ops))
    return out
