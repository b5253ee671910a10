"""Identifier escaping for tables, columns and aliases."""

from typing import Any


def quote(*segments: Any, quote_char: str = '`') -> str:
    """Wrap segments in the escape character, joined with dots: quote('users', 'id') -> `users`.`id`."""
    return quote_char + f'{quote_char}.{quote_char}'.join(str(s) for s in segments) + quote_char


def quote_dotted(identifier: Any, sep: str = '.', quote_char: str = '`') -> str:
    """Quote each sep-separated part of identifier independently and rejoin with sep."""
    text = str(identifier)
    if sep in text:
        return sep.join(quote(part, quote_char=quote_char) for part in text.split(sep))
    return quote(text, quote_char=quote_char)


def quote_source(identifier: Any, quote_char: str = '`') -> str:
    """Quote a 'table alias' or 'schema.table alias' source, token by token."""
    return ' '.join(quote_dotted(tok, quote_char=quote_char) for tok in str(identifier).split())
