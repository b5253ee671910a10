"""Dialect tables and bind-type mappings used by the statement builder."""

from typing import Dict

# Placeholder marker minted in front of every bound token
token_prefix = ':'

# Default and bounds for the random part of a token
default_token_length = 6
token_length_bounds = (4, 12)

# Identifier escape character per dialect
quote_chars = {
    'default': '`',
    'mysql': '`',
    'sqlite': '`',
    'postgresql': '"',
    'postgres': '"',
    'oracle': '"',
    'mssql': '"',
}

# Delimiter around literal LIKE patterns embedded in compat mode
like_delims = {
    'default': '"',
    'mysql': '"',
    'sqlite': '"',
    'postgresql': "'",
    'postgres': "'",
    'oracle': "'",
    'mssql': "'",
}

# How each join kind quotes its table and ON fields.
# 'dotted' splits on space/dot and supports aliases, 'plain' wraps the whole name.
JOIN_QUOTING: Dict[str, str] = {
    'innerjoin': 'dotted',
    'leftjoin': 'plain',
    'rightjoin': 'plain',
}

# Pandas dtype -> bind type name
dtype_bind_types = {
    'int8': 'int', 'int16': 'int', 'int32': 'int', 'int64': 'int', 'Int64': 'int',
    'uint8': 'int', 'uint16': 'int', 'uint32': 'int', 'uint64': 'int',
    'float32': 'float', 'float64': 'float', 'Float64': 'float',
    'bool': 'bool', 'boolean': 'bool',
    'object': 'str', 'string': 'str', 'category': 'str',
    'datetime64[ns]': 'datetime', 'timedelta64[ns]': 'str',
}

# Column type names reported by drivers -> bind type name
param_types = {
    'TIMESTAMP': 'str', 'DATE': 'str', 'DATETIME': 'str',
    'LONG': 'int', 'INT': 'int', 'TINY': 'int', 'MEDIUM': 'int',
    'INTEGER': 'int', 'BIGINT': 'int',
    'DOUBLE': 'str', 'FLOAT': 'str',
    'BOOL': 'bool', 'BOOLEAN': 'bool',
    'VAR_STRING': 'str', 'VARCHAR': 'str', 'TEXT': 'str',
}

