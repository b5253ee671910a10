"""Reserved keywords and operator whitelists consumed by the statement builder."""

from typing import Any, Dict, List, Optional


class Lexicon:
    """Keyword lookup plus whitelist validation.

    Subclass and override ``keywords`` or ``allowed`` to swap the vocabulary;
    pass the subclass to ``StatementBuilder(lexicon=...)``.
    """
    keywords: Dict[str, str] = {
        'or': 'or',
        'and': 'and',
        'set': 'set',
        'where': 'where',
        'like': 'like',
        'notlike': 'not like',
        'from': 'from',
        'select': 'select',
        'update': 'update',
        'delete': 'delete from',
        'values': 'values',
        'insert': 'insert into',
        'having': 'having',
        'between': 'between',
        'nothaving': 'not having',
        'notbetween': 'not between',
        'groupby': 'group by',
        'orderby': 'order by',
        'limit': 'limit',
        'not': 'not',
        'in': 'in',
        'notin': 'not in',
        'on': 'on',
        'innerjoin': 'inner join',
        'leftjoin': 'left join',
        'rightjoin': 'right join',
    }

    allowed: Dict[str, Dict[str, Any]] = {
        'directions': {'members': ['asc', 'desc'], 'default': 'asc'},
        'logical': {'members': ['and', 'or'], 'default': 'and'},
        'equality': {'members': ['>', '>=', '=', '<=', '<', '!=', 'IN', 'NOT IN'], 'default': '='},
        'like': {'members': ['%a%', 'a%', '%a'], 'default': '%a%'},
    }

    @classmethod
    def key(cls, name: str) -> Optional[str]:
        """Return the upper-cased SQL text for a keyword name, or None."""
        text = cls.keywords.get(name)
        return text.upper() if text is not None else None

    @classmethod
    def members(cls, group: str) -> List[str]:
        """Return the whitelist of a group (empty for unknown groups)."""
        return list(cls.allowed.get(group, {}).get('members', []))

    @classmethod
    def validate(cls, candidate: Any, group: str) -> Optional[str]:
        """Return the upper-cased candidate if whitelisted, else the group's default."""
        spec = cls.allowed.get(group)
        if spec is None:
            return None
        if isinstance(candidate, str):
            for member in spec['members']:
                if candidate.strip().lower() == member.lower():
                    return member.upper()
        return spec['default'].upper()
