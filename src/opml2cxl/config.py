"""Application configuration.

Configuration is loaded from environment variables. For local use, you can provide a
`.env` file in the working directory or set `OPML2CXL_ENV_FILE` to point to one.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LINKING_PHRASE = "is a part of"

# Characters XML 1.0 does not allow in attribute values
_XML_ILLEGAL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def check_linking_phrase(text: str) -> str:
    """Return `text` unchanged if it can be written as a CXL label.

    Raises:
        ValueError: If `text` contains characters XML cannot represent.
    """

    m = _XML_ILLEGAL_RE.search(text)
    if m:
        raise ValueError(f"linking phrase contains a character XML cannot represent: {m.group()!r}")
    return text


class Settings(BaseSettings):
    """Converter settings.

    All fields are environment-configurable. Prefix is `OPML2CXL_`.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPML2CXL_",
        env_file=None,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")

    # Conversion
    linking_phrase: str = Field(default=DEFAULT_LINKING_PHRASE)
    stable_ids: bool = Field(default=False)

    # Output
    output_suffix: str = Field(default=".cxl")
    pretty_print: bool = Field(default=True)

    @field_validator("linking_phrase")
    @classmethod
    def _xml_safe_phrase(cls, v: str) -> str:
        return check_linking_phrase(v)

    @field_validator("output_suffix")
    @classmethod
    def _dotted_suffix(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("output_suffix must not be empty")
        return v if v.startswith(".") else f".{v}"


def load_settings() -> Settings:
    """Load settings from env.

    Returns:
        Settings: Parsed settings.
    """

    env_file_override = os.getenv("OPML2CXL_ENV_FILE")
    if env_file_override:
        return Settings(_env_file=Path(env_file_override))

    default_env = Path.cwd() / ".env"
    if default_env.exists():
        return Settings(_env_file=default_env)

    return Settings()
