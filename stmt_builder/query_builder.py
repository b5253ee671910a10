"""Fluent builder for parameterized SELECT, UPDATE, INSERT and DELETE statements."""

import copy
import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Type, Union

from .bindings import BindingTable, is_sequence
from .conditions import PredicateRenderer, is_where_tuple
from .identifiers import quote, quote_dotted, quote_source
from .lexicon import Lexicon
from .mappings import JOIN_QUOTING, default_token_length, like_delims, quote_chars

logger = logging.getLogger(__name__)


class Shape(Enum):
    """Statement kinds, in build priority order."""
    SELECT = 'select'
    UPDATE = 'update'
    INSERT = 'insert'
    DELETE = 'delete'


CLAUSES_TEMPLATE: Dict[str, Any] = {
    'select': [],
    'update': None,
    'insert': None,
    'delete': None,
    'limit': None,
    'from': [],
    'set': [],
    'values': [],
    'fieldnames': [],
    'joins': [],
    'orderby': [],
    'groupby': [],
    'where': [],
    'orwhere': [],
    'between': [],
    'notbetween': [],
    'orbetween': [],
    'ornotbetween': [],
    'like': [],
    'orlike': [],
    'notlike': [],
    'ornotlike': [],
    'having': [],
    'orhaving': [],
}

STATISTICS_TEMPLATE: Dict[str, int] = {'joins': 0, 'where': 0, 'between': 0, 'like': 0, 'having': 0}

# (statistics key, [(clause kind, connector)]) in emission order
PREDICATE_FAMILIES = (
    ('where', (('where', 'and'), ('orwhere', 'or'))),
    ('between', (('between', 'and'), ('notbetween', 'and'), ('orbetween', 'or'), ('ornotbetween', 'or'))),
    ('like', (('like', 'and'), ('orlike', 'or'), ('notlike', 'and'), ('ornotlike', 'or'))),
)

class StatementBuilder:
    """Accumulates clauses through chained calls and renders one statement on build().

    The first of select/update/insert/delete locks the statement shape; later
    shape calls are ignored. Every other registration is appended regardless
    of the shape, and only the clauses the shape uses are read at build time.
    Literal values go through bind() and reach the SQL only as tokens.
    """

    def __init__(self, query_id: Optional[str] = None, dialect: str = 'default', strict: bool = False,
                 token_length: int = default_token_length, lexicon: Type[Lexicon] = Lexicon):
        self.query_id = query_id
        self.dialect = dialect.lower()
        self.strict = strict
        self.lexicon = lexicon
        self.quote_char = quote_chars.get(self.dialect, '`')
        self.shape: Optional[Shape] = None
        self.clauses: Dict[str, Any] = copy.deepcopy(CLAUSES_TEMPLATE)
        self.statistics: Dict[str, int] = dict(STATISTICS_TEMPLATE)
        self.query = ''
        self._limit: Optional[int] = None
        self._bindings = BindingTable(token_length)
        self._render = PredicateRenderer(self.bind, lexicon, self.quote_char,
                                         like_delims.get(self.dialect, '"'), strict)

    def __repr__(self) -> str:
        shape = self.shape.value if self.shape else 'empty'
        return f'<StatementBuilder id={self.query_id!r} shape={shape} bindings={len(self._bindings)}>'

    # Shape

    def _lock(self, shape: Shape) -> bool:
        if self.shape is None:
            self.shape = shape
            return True
        if self.shape is not shape:
            logger.debug(f'Ignoring {shape.value}(): builder already locked to {self.shape.value}')
        return False

    def select(self, *fields: Any) -> 'StatementBuilder':
        """SELECT fields (verbatim expressions, not quoted)."""
        if self._lock(Shape.SELECT):
            self.clauses['select'].extend(fields)
        return self

    def add_select(self, *fields: Any) -> 'StatementBuilder':
        """Extend the select list regardless of the shape lock."""
        self.clauses['select'].extend(fields)
        return self

    def update(self, table: str) -> 'StatementBuilder':
        if self._lock(Shape.UPDATE):
            self.clauses['update'] = table
        return self

    def insert(self, table: str) -> 'StatementBuilder':
        if self._lock(Shape.INSERT):
            self.clauses['insert'] = table
        return self

    def delete(self, table: str) -> 'StatementBuilder':
        if self._lock(Shape.DELETE):
            self.clauses['delete'] = table
        return self

    # Sources and targets

    def from_(self, *tables: str) -> 'StatementBuilder':
        """Add FROM sources; 'users u' quotes as `users` `u`. Blank sources are skipped."""
        for table in tables:
            source = quote_source(table, quote_char=self.quote_char) if table is not None else ''
            if not source:
                logger.debug(f'Ignoring blank FROM source {table!r}')
                continue
            self.clauses['from'].append(source)
        return self

    def set(self, field: Union[str, Dict[str, Any]], value: Any = None) -> 'StatementBuilder':
        """Add `field` = :token assignments; None values are skipped."""
        if isinstance(field, dict):
            for k, v in field.items():
                self.set(k, v)
        elif isinstance(field, str) and value is not None:
            self.clauses['set'].append(f'{self.quote(field)} = {self.bind(value)}')
        return self

    def fieldnames(self, fields: Sequence[str]) -> 'StatementBuilder':
        """Merge insert column names, keeping first-seen order without duplicates."""
        merged = self.clauses['fieldnames']
        for f in fields:
            if f not in merged:
                merged.append(f)
        return self

    def values(self, row: Sequence[Any], types: Optional[Sequence[Any]] = None) -> 'StatementBuilder':
        """Bind one row of insert values; call again for multi-row inserts."""
        if not is_sequence(row):
            logger.warning(f'values() expects a list or tuple, got {type(row).__name__}')
            return self
        tokens = []
        for idx, value in enumerate(row):
            bind_type = types[idx] if types is not None and idx < len(types) else None
            tokens.append(self.bind(value, bind_type))
        self.clauses['values'].append(f'({", ".join(tokens)})')
        return self

    # Joins

    def _join(self, kind: str, table: str, left: str, right: str) -> 'StatementBuilder':
        self.statistics['joins'] += 1
        if JOIN_QUOTING.get(kind) == 'dotted':
            target, lhs, rhs = (quote_source(table, quote_char=self.quote_char), self.quote_dotted(right),
                                self.quote_dotted(left))
        else:
            target, lhs, rhs = self.quote(table), self.quote(right), self.quote(left)
        self.clauses['joins'].append(f'{self._kw(kind)} {target} {self._kw("on")} {lhs} = {rhs}')
        return self

    def join(self, table: str, left: str, right: str) -> 'StatementBuilder':
        """INNER JOIN table ON right = left (alias and dotted names supported)."""
        return self._join('innerjoin', table, left, right)

    def left_join(self, table: str, left: str, right: str) -> 'StatementBuilder':
        return self._join('leftjoin', table, left, right)

    def right_join(self, table: str, left: str, right: str) -> 'StatementBuilder':
        return self._join('rightjoin', table, left, right)

    # Predicates

    def _predicate(self, kind: str, field: Any, operator: Any, value: Any) -> 'StatementBuilder':
        self.statistics['where'] += 1
        if is_where_tuple(field) and is_where_tuple(value):
            fragment = self._render.grouped(field, operator, value)
        else:
            fragment = self._render.where(field, operator, value)
        self.clauses[kind].append(fragment)
        return self

    def where(self, field: Any, operator: Any, value: Any) -> 'StatementBuilder':
        """AND predicate; two where-tuples plus 'and'/'or' make a grouped predicate."""
        return self._predicate('where', field, operator, value)

    def or_where(self, field: Any, operator: Any, value: Any) -> 'StatementBuilder':
        return self._predicate('orwhere', field, operator, value)

    def _between(self, kind: str, field: Any, begin: Any, end: Any, negate: bool) -> 'StatementBuilder':
        self.statistics['between'] += 1
        self.clauses[kind].append(self._render.between(field, begin, end, negate=negate))
        return self

    def between(self, field: Any, begin: Any, end: Any) -> 'StatementBuilder':
        """Numeric BETWEEN; non-numeric bounds become 0 unless strict."""
        return self._between('between', field, begin, end, False)

    def not_between(self, field: Any, begin: Any, end: Any) -> 'StatementBuilder':
        return self._between('notbetween', field, begin, end, True)

    def or_between(self, field: Any, begin: Any, end: Any) -> 'StatementBuilder':
        return self._between('orbetween', field, begin, end, False)

    def or_not_between(self, field: Any, begin: Any, end: Any) -> 'StatementBuilder':
        return self._between('ornotbetween', field, begin, end, True)

    def _like(self, kind: str, field: Any, argument: Any, pattern: Optional[str], negate: bool) -> 'StatementBuilder':
        self.statistics['like'] += 1
        self.clauses[kind].append(self._render.like(field, argument, pattern, negate=negate))
        return self

    def like(self, field: Any, argument: Any, pattern: str = '%a%') -> 'StatementBuilder':
        """LIKE with pattern '%a%', 'a%' or '%a'; the argument is embedded unless strict."""
        return self._like('like', field, argument, pattern, False)

    def or_like(self, field: Any, argument: Any, pattern: str = '%a%') -> 'StatementBuilder':
        return self._like('orlike', field, argument, pattern, False)

    def not_like(self, field: Any, argument: Any, pattern: str = '%a%') -> 'StatementBuilder':
        return self._like('notlike', field, argument, pattern, True)

    def or_not_like(self, field: Any, argument: Any, pattern: str = '%a%') -> 'StatementBuilder':
        return self._like('ornotlike', field, argument, pattern, True)

    def having(self, field: Any, operator: Any, value: Any) -> 'StatementBuilder':
        self.statistics['having'] += 1
        self.clauses['having'].append(self._render.where(field, operator, value))
        return self

    def or_having(self, field: Any, operator: Any, value: Any) -> 'StatementBuilder':
        self.statistics['having'] += 1
        self.clauses['orhaving'].append(self._render.where(field, operator, value))
        return self

    # Grouping, ordering, limiting

    def group_by(self, field: str, table: Optional[str] = None) -> 'StatementBuilder':
        self.clauses['groupby'].append(self.quote(table, field) if table is not None else self.quote(field))
        return self

    def order_by(self, field: str, direction: Optional[str] = None, table: Optional[str] = None) -> 'StatementBuilder':
        column = self.quote(table, field) if table is not None else self.quote(field)
        self.clauses['orderby'].append(f'{column} {self.lexicon.validate(direction, "directions")}')
        return self

    def limit(self, count: Any, page: Any = None, as_page: bool = True) -> 'StatementBuilder':
        """LIMIT count[, offset]; with as_page the page number becomes offset = page*count - count."""
        if not _is_int(count) or count < 0 or (page is not None and not _is_int(page)):
            logger.warning(f'Ignoring limit({count!r}, {page!r}): count and page must be integers')
            return self
        self._limit = count
        if page is not None and as_page:
            page = page * count - count
        self.clauses['limit'] = f'{count}, {page}' if page is not None else f'{count}'
        return self

    # Terminal accessors

    def get(self, limit: Optional[int] = None) -> Optional[str]:
        """Optionally apply a limit, then build."""
        if limit is not None:
            self.limit(limit)
        return self.build()

    def build(self) -> Optional[str]:
        """Render the locked shape; None when nothing to build or an UPDATE lacks SET."""
        self.query = ''
        if self.clauses['select']:
            sql = self._build_select()
        elif self.clauses['update']:
            sql = self._build_update()
        elif self.clauses['insert']:
            sql = self._build_insert()
        elif self.clauses['delete']:
            sql = self._build_delete()
        else:
            logger.warning(f'Nothing to build for query {self.query_id!r}: no select/update/insert/delete')
            return None
        if sql is None:
            return None
        self.query = sql
        logger.debug(f'Built query {self.query_id!r}: {sql}')
        return sql

    def get_bindings(self) -> Dict[str, Any]:
        return dict(self._bindings.values)

    def get_binding_types(self) -> Optional[Dict[str, Any]]:
        """token -> declared type, or None if no typed binding was registered."""
        return dict(self._bindings.types) if self._bindings.types else None

    def get_limit(self) -> Optional[int]:
        """Raw numeric limit while a limit clause is active."""
        return self._limit if self.clauses['limit'] is not None else None

    def reset(self) -> 'StatementBuilder':
        """Clear clauses, bindings, statistics and the shape lock; keep the id."""
        self.shape = None
        self.query = ''
        self.clauses = copy.deepcopy(CLAUSES_TEMPLATE)
        self.statistics = dict(STATISTICS_TEMPLATE)
        self._limit = None
        self._bindings.clear()
        return self

    # Binding and quoting helpers

    def bind(self, value: Any, bind_type: Any = None) -> str:
        """Return a fresh token bound to value; lists and tuples render inline as (a,b,c)."""
        if is_sequence(value):
            return '(' + ','.join(str(v) for v in value) + ')'
        return self._bindings.add(value, bind_type)

    def quote(self, *segments: Any) -> str:
        return quote(*segments, quote_char=self.quote_char)

    def quote_dotted(self, identifier: Any) -> str:
        return quote_dotted(identifier, quote_char=self.quote_char)

    # Assembly

    def _kw(self, name: str) -> str:
        return self._render.kw(name)

    def _predicate_tail(self) -> str:
        """WHERE plus the where, between and like families, AND/OR-joined in fixed order."""
        parts: List[str] = []
        for stat, groups in PREDICATE_FAMILIES:
            if self.statistics[stat] == 0:
                continue
            for kind, connector in groups:
                fragments = self.clauses[kind]
                if not fragments:
                    continue
                joiner = f' {self._kw(connector)} '
                body = joiner.join(fragments)
                parts.append(f'{self._kw(connector)} {body}' if parts else body)
        if not parts:
            return ''
        return f'{self._kw("where")} {" ".join(parts)} '

    def _having_tail(self) -> str:
        if self.statistics['having'] == 0:
            return ''
        body = f' {self._kw("and")} '.join(self.clauses['having'])
        for fragment in self.clauses['orhaving']:
            body = f'{body} {self._kw("or")} {fragment}' if body else fragment
        return f'{self._kw("having")} {body} ' if body else ''

    def _limit_tail(self) -> str:
        if self.clauses['limit'] in (None, ''):
            return ''
        return f'{self._kw("limit")} {self.clauses["limit"]}'

    def _finish(self, sql: str) -> str:
        return sql.strip() + ';'

    def _build_select(self) -> str:
        sql = f'{self._kw("select")} {", ".join(str(f) for f in self.clauses["select"])} '
        if self.clauses['from']:
            sql += f'{self._kw("from")} {", ".join(self.clauses["from"])} '
        if self.clauses['joins']:
            sql += ' '.join(self.clauses['joins']) + ' '
        sql += self._predicate_tail()
        if self.clauses['groupby']:
            sql += f'{self._kw("groupby")} {", ".join(self.clauses["groupby"])} '
        sql += self._having_tail()
        if self.clauses['orderby']:
            sql += f'{self._kw("orderby")} {", ".join(self.clauses["orderby"])} '
        sql += self._limit_tail()
        return self._finish(sql)

    def _build_update(self) -> Optional[str]:
        if not self.clauses['set']:
            logger.warning(f'UPDATE {self.clauses["update"]} has no SET assignments; nothing built')
            return None
        sql = (f'{self._kw("update")} {self.quote(self.clauses["update"])} '
               f'{self._kw("set")} {", ".join(self.clauses["set"])} ')
        sql += self._predicate_tail()
        sql += self._limit_tail()
        return self._finish(sql)

    def _build_insert(self) -> str:
        sql = f'{self._kw("insert")} {self.quote(self.clauses["insert"])} '
        if self.clauses['fieldnames']:
            sql += f'({", ".join(self.clauses["fieldnames"])}) '
        sql += f'{self._kw("values")} {", ".join(self.clauses["values"])}'
        return self._finish(sql)

    def _build_delete(self) -> str:
        sql = f'{self._kw("delete")} {self.quote(self.clauses["delete"])} '
        sql += self._predicate_tail()
        sql += self._limit_tail()
        return self._finish(sql)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
