"""Registry of reusable statement builders keyed by identifier."""

import logging
from typing import Dict, Iterator, Optional

from .bindings import make_id
from .mappings import default_token_length
from .query_builder import StatementBuilder

logger = logging.getLogger(__name__)


class BuilderPool:
    """Owns builders by id; get() creates a fresh builder for an unknown id."""

    def __init__(self, dialect: str = 'default', strict: bool = False, token_length: int = default_token_length,
                 id_length: int = 4):
        self.dialect = dialect
        self.strict = strict
        self.token_length = token_length
        self.id_length = id_length
        self._builders: Dict[str, StatementBuilder] = {}

    def _new(self, query_id: str) -> StatementBuilder:
        builder = StatementBuilder(query_id, dialect=self.dialect, strict=self.strict,
                                   token_length=self.token_length)
        self._builders[query_id] = builder
        return builder

    def create(self) -> str:
        """Register a fresh builder under a new numeric id and return the id."""
        query_id = make_id(self.id_length)
        while query_id in self._builders:
            query_id = make_id(self.id_length)
        self._new(query_id)
        return query_id

    def get(self, query_id: Optional[str] = None) -> StatementBuilder:
        """Return the builder for query_id, creating it when missing."""
        if query_id is None:
            return self._builders[self.create()]
        builder = self._builders.get(query_id)
        if builder is None:
            logger.debug(f'No builder for id {query_id!r}; creating one')
            builder = self._new(query_id)
        return builder

    def release(self, query_id: str) -> bool:
        """Forget a builder; returns False when the id was unknown."""
        return self._builders.pop(query_id, None) is not None

    def __contains__(self, query_id: str) -> bool:
        return query_id in self._builders

    def __len__(self) -> int:
        return len(self._builders)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._builders))
