"""JSON payload handling for statement building."""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .adapt_sql import adapt_sql, adapt_types
from .bindings import bind_type_for
from .conditions import BETWEEN_KINDS, LIKE_KINDS, NOT_BETWEEN_KINDS, NOT_LIKE_KINDS, is_where_tuple
from .query_builder import StatementBuilder

logger = logging.getLogger(__name__)

# Builder methods a replayed chain may call
CHAIN_METHODS = {
    'select', 'add_select', 'update', 'insert', 'delete', 'from_', 'set', 'fieldnames', 'values',
    'join', 'left_join', 'right_join', 'where', 'or_where', 'between', 'not_between', 'or_between',
    'or_not_between', 'like', 'or_like', 'not_like', 'or_not_like', 'having', 'or_having',
    'group_by', 'order_by', 'limit',
}
CHAIN_ALIASES = {'from': 'from_'}


def _require(payload: Dict[str, Any], required: Sequence[str]):
    if not isinstance(payload, dict):
        raise TypeError(f'Payload must be a JSON object, got {type(payload).__name__}')
    missing = [k for k in required if k not in payload]
    if missing:
        raise ValueError(f'Missing required fields: {missing}')


def _as_tuple(cond: Any) -> List[Any]:
    """Normalize a [field, op, value(, extra)] list or a {'field', 'operator', 'value', 'extra'} dict."""
    if isinstance(cond, dict):
        if 'field' not in cond or 'operator' not in cond:
            raise ValueError(f'Condition needs field and operator: {cond}')
        out = [cond['field'], cond['operator'], cond.get('value')]
        if 'extra' in cond:
            out.append(cond['extra'])
        return out
    if is_where_tuple(cond):
        return list(cond)
    raise ValueError(f'Invalid condition: {cond!r}')


def apply_condition(builder: StatementBuilder, cond: Any, conjunctive: bool = True) -> StatementBuilder:
    """Register one payload condition on builder, AND-ed or OR-ed."""
    if isinstance(cond, dict) and 'group' in cond:
        left, logical, right = cond['group']
        register = builder.where if conjunctive else builder.or_where
        return register(_as_tuple(left), logical, _as_tuple(right))
    item = _as_tuple(cond)
    field, kind, value = item[0], item[1], item[2]
    extra = item[3] if len(item) == 4 else None
    name = kind.lower() if isinstance(kind, str) else kind
    if name in BETWEEN_KINDS:
        return (builder.between if conjunctive else builder.or_between)(field, value, extra)
    if name in NOT_BETWEEN_KINDS:
        return (builder.not_between if conjunctive else builder.or_not_between)(field, value, extra)
    if name in LIKE_KINDS:
        return (builder.like if conjunctive else builder.or_like)(field, value, extra or '%a%')
    if name in NOT_LIKE_KINDS:
        return (builder.not_like if conjunctive else builder.or_not_like)(field, value, extra or '%a%')
    return (builder.where if conjunctive else builder.or_where)(field, kind, value)


def _apply_filters(builder: StatementBuilder, payload: Dict[str, Any]):
    for cond in payload.get('condition') or []:
        apply_condition(builder, cond)
    for cond in payload.get('or_condition') or []:
        apply_condition(builder, cond, conjunctive=False)


def _apply_limit(builder: StatementBuilder, payload: Dict[str, Any]):
    if payload.get('limit') is not None:
        builder.limit(payload['limit'], payload.get('page'), payload.get('as_page', True))


def _build(builder: StatementBuilder) -> str:
    sql = builder.build()
    if not sql:
        raise ValueError('Payload did not produce a statement')
    return sql


def _finish(builder: StatementBuilder, dialect: str) -> Tuple[str, Any]:
    return adapt_sql(_build(builder), builder.get_bindings(), dialect)


def _finish_typed(builder: StatementBuilder, dialect: str) -> Tuple[str, Any, Any]:
    """Like _finish, plus the declared bind types shaped like the params."""
    sql = _build(builder)
    adapted, params = adapt_sql(sql, builder.get_bindings(), dialect)
    return adapted, params, adapt_types(sql, builder.get_bindings(), builder.get_binding_types(), dialect)


def json_select(payload: Dict[str, Any], dialect: str = 'default', strict: bool = False) -> Tuple[str, Any]:
    """Generate SELECT query from JSON payload."""
    _require(payload, ['table'])
    fields = payload.get('fields', '*')
    builder = StatementBuilder(dialect=dialect, strict=strict)
    builder.select(*(fields if isinstance(fields, list) else [fields])).from_(payload['table'])
    for j in payload.get('join') or []:
        _require(j, ['table', 'left', 'right'])
        kind = str(j.get('type', 'inner')).lower()
        register = {'inner': builder.join, 'left': builder.left_join, 'right': builder.right_join}.get(kind)
        if register is None:
            raise ValueError(f'Invalid join type: {kind}')
        register(j['table'], j['left'], j['right'])
    _apply_filters(builder, payload)
    for g in payload.get('groupby') or []:
        builder.group_by(g)
    for h in payload.get('having') or []:
        field, op, value = _as_tuple(h)[:3]
        builder.having(field, op, value)
    for o in payload.get('orderby') or []:
        if not isinstance(o, dict) or 'field' not in o:
            raise ValueError(f'orderby entries need a field: {o!r}')
        builder.order_by(o['field'], o.get('direction', 'asc'), o.get('table'))
    _apply_limit(builder, payload)
    return _finish(builder, dialect)


def json_insert(rows: List[Dict[str, Any]], dialect: str = 'default', multi_row: bool = True,
                strict: bool = False) -> List[Tuple[str, Any, Any]]:
    """Generate (sql, params, types) INSERT queries from JSON rows of {'table', 'insertValues', 'insertTypes'?}."""
    if not rows:
        raise ValueError('No rows provided for insert')
    for r in rows:
        _require(r, ['table', 'insertValues'])
    same_table = len(set(r['table'] for r in rows)) == 1
    groups = [rows] if multi_row and same_table else [[r] for r in rows]
    out = []
    for group in groups:
        builder = StatementBuilder(dialect=dialect, strict=strict)
        cols = list(dict.fromkeys(k for r in group for k in r['insertValues']))
        builder.insert(group[0]['table']).fieldnames(cols)
        for r in group:
            declared = r.get('insertTypes') or {}
            types = [bind_type_for(declared[c]) if c in declared else None for c in cols]
            builder.values([r['insertValues'].get(c) for c in cols], types if declared else None)
        out.append(_finish_typed(builder, dialect))
    return out


def json_update(payload: Dict[str, Any], dialect: str = 'default', strict: bool = False) -> Tuple[str, Any]:
    """Generate UPDATE query from JSON payload."""
    _require(payload, ['table', 'updateValues'])
    if not payload.get('condition') and not payload.get('or_condition') and not payload.get('allow_full'):
        raise ValueError('UPDATE without WHERE refused; use allow_full=True if intended')
    builder = StatementBuilder(dialect=dialect, strict=strict)
    builder.update(payload['table']).set(payload['updateValues'])
    _apply_filters(builder, payload)
    _apply_limit(builder, payload)
    return _finish(builder, dialect)


def json_delete(payload: Dict[str, Any], dialect: str = 'default', strict: bool = False) -> Tuple[str, Any]:
    """Generate DELETE query from JSON payload."""
    _require(payload, ['table'])
    if not payload.get('condition') and not payload.get('or_condition') and not payload.get('allow_full'):
        raise ValueError('DELETE without WHERE refused; use allow_full=True if intended')
    builder = StatementBuilder(dialect=dialect, strict=strict)
    builder.delete(payload['table'])
    _apply_filters(builder, payload)
    _apply_limit(builder, payload)
    return _finish(builder, dialect)


def build_from_chain(chain: List[Any], builder: Optional[StatementBuilder] = None,
                     dialect: str = 'default') -> Tuple[str, Any]:
    """Replay [method, *args] steps (or {'method', 'args', 'kwargs'}) on a builder and build."""
    if not isinstance(chain, list) or not chain:
        raise ValueError('Chain must be a non-empty list of steps')
    if builder is None:
        builder = StatementBuilder(dialect=dialect)
    dialect = builder.dialect
    for step in chain:
        if isinstance(step, dict):
            name, args, kwargs = step.get('method'), step.get('args', []), step.get('kwargs', {})
        elif isinstance(step, (list, tuple)) and step:
            name, args, kwargs = step[0], list(step[1:]), {}
        else:
            raise ValueError(f'Invalid chain step: {step!r}')
        name = CHAIN_ALIASES.get(name, name)
        if name not in CHAIN_METHODS:
            raise ValueError(f'Method not allowed in chain: {name!r}')
        try:
            getattr(builder, name)(*args, **kwargs)
        except TypeError as e:
            raise ValueError(f'Bad arguments for {name}: {e}') from e
    logger.debug(f'Replayed {len(chain)} steps on builder {builder.query_id!r}')
    return _finish(builder, dialect)
