"""Predicate rendering for WHERE, BETWEEN, LIKE and HAVING fragments.

Rendering never touches a builder's clause set: every method returns the
fragment text and only mints bindings through the ``bind`` callable it was
given. Registration (statistics, appending) stays in ``StatementBuilder``.
"""

from typing import Any, Callable, Optional, Sequence, Type

from .bindings import to_number
from .identifiers import quote_dotted
from .lexicon import Lexicon

BETWEEN_KINDS = ('between', 'orbetween')
NOT_BETWEEN_KINDS = ('notbetween', 'ornotbetween')
LIKE_KINDS = ('like', 'orlike')
NOT_LIKE_KINDS = ('notlike', 'ornotlike')


def is_where_tuple(item: Any) -> bool:
    """True for a [field, operator, value(, extra)] list or tuple."""
    return isinstance(item, (list, tuple)) and len(item) in (3, 4)


class PredicateRenderer:
    """Renders single predicates for one builder."""
    __slots__ = ('bind', 'lexicon', 'quote_char', 'like_delim', 'strict')

    def __init__(self, bind: Callable[..., str], lexicon: Type[Lexicon] = Lexicon, quote_char: str = '`',
                 like_delim: str = '"', strict: bool = False):
        self.bind = bind
        self.lexicon = lexicon
        self.quote_char = quote_char
        self.like_delim = like_delim
        self.strict = strict

    def kw(self, name: str) -> str:
        """Keyword text, or an empty gap when the lexicon does not know it."""
        return self.lexicon.key(name) or ''

    def field(self, name: Any) -> str:
        return quote_dotted(name, quote_char=self.quote_char)

    def where(self, field: Any, operator: Any, value: Any) -> str:
        """`field` OP :token"""
        op = self.lexicon.validate(operator, 'equality')
        return f'{self.field(field)} {op} {self.bind(value)}'

    def grouped(self, left: Sequence[Any], logical: Any, right: Sequence[Any]) -> str:
        """(left AND|OR right), each side rendered through the tuple dispatch."""
        connector = self.lexicon.validate(logical, 'logical')
        return f'({self.tuple(left)} {connector} {self.tuple(right)})'

    def between(self, field: Any, begin: Any, end: Any, negate: bool = False) -> str:
        """BETWEEN embeds coerced numbers (compat mode); NOT BETWEEN always binds."""
        if negate or self.strict:
            low, high = self.bind(begin), self.bind(end)
        else:
            low, high = to_number(begin), to_number(end)
        keyword = self.kw('notbetween' if negate else 'between')
        return f'{self.field(field)} {keyword} {low} {self.kw("and")} {high}'

    def like(self, field: Any, argument: Any, pattern: Optional[str] = None, negate: bool = False) -> str:
        """Substitute argument for the 'a' in pattern and compare with LIKE / NOT LIKE."""
        if pattern not in self.lexicon.members('like'):
            pattern = self.lexicon.allowed['like']['default']
        literal = pattern.replace('a', str(argument))
        operand = self.bind(literal) if self.strict else f'{self.like_delim}{literal}{self.like_delim}'
        return f'{self.field(field)} {self.kw("notlike" if negate else "like")} {operand}'

    def tuple(self, item: Sequence[Any]) -> str:
        """Dispatch a where-tuple on its second element."""
        if not is_where_tuple(item):
            return ''
        field, kind, value = item[0], item[1], item[2]
        extra = item[3] if len(item) == 4 else None
        name = kind.lower() if isinstance(kind, str) else kind
        if name in BETWEEN_KINDS:
            return self.between(field, value, extra)
        if name in NOT_BETWEEN_KINDS:
            return self.between(field, value, extra, negate=True)
        if name in LIKE_KINDS:
            return self.like(field, value, extra)
        if name in NOT_LIKE_KINDS:
            return self.like(field, value, extra, negate=True)
        return self.where(field, kind, value)
