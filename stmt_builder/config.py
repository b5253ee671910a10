"""Runtime configuration for the preview service, read from STMT_* environment variables."""

from typing import Any, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .mappings import default_token_length, quote_chars, token_length_bounds


class BuilderSettings(BaseSettings):
    """Builder defaults; malformed values raise a ValidationError instead of falling back."""

    model_config = SettingsConfigDict(
        env_prefix='STMT_',
        case_sensitive=False,
        extra='ignore',
    )

    dialect: str = Field(default='default', description='Target dialect for quoting and paramstyle')
    strict: bool = Field(default=False, description='Bind LIKE patterns and BETWEEN bounds')
    token_length: int = Field(default=default_token_length, ge=token_length_bounds[0], le=token_length_bounds[1],
                              description='Length of the random part of a placeholder token')
    debug: bool = Field(default=False, description='Run the Flask app in debug mode')

    @field_validator('dialect')
    @classmethod
    def validate_dialect(cls, v: str) -> str:
        d = v.strip().lower()
        if d not in quote_chars:
            raise ValueError(f'Unknown dialect {v!r}; expected one of {sorted(quote_chars)}')
        return d


def load_config(**overrides: Any) -> Dict[str, Any]:
    """Settings from the environment (plus overrides) as a plain dict."""
    return BuilderSettings(**overrides).model_dump()


BUILDER_CONFIG = load_config()
