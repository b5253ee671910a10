"""Fluent SQL statement builder with placeholder bindings."""

from .lexicon import Lexicon
from .query_builder import StatementBuilder, Shape
from .pool import BuilderPool
from .bindings import BindingTable, make_token, to_number
from .identifiers import quote, quote_dotted
from .adapt_sql import adapt_sql, adapt_types, to_text_clause
from .json_handler import json_select, json_insert, json_update, json_delete, build_from_chain
from .df_handler import df_insert, df_sql

__all__ = [
    'Lexicon',
    'StatementBuilder',
    'Shape',
    'BuilderPool',
    'BindingTable',
    'make_token',
    'to_number',
    'quote',
    'quote_dotted',
    'adapt_sql',
    'adapt_types',
    'to_text_clause',
    'json_select',
    'json_insert',
    'json_update',
    'json_delete',
    'build_from_chain',
    'df_insert',
    'df_sql'
]
