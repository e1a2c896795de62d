"""Settings for dynquery."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class DynQuerySettings(BaseSettings):
    """dynquery configuration settings."""

    # Paging
    DEFAULT_PAGE_SIZE: int = 20

    # Direction paired with an orderBy entry that has no orderByDirection at the same index
    DEFAULT_SORT_DIRECTION: Literal["asc", "desc"] = "asc"

    # Largest gap the decoder fills with holes in select/selectAs/orderBy/orderByDirection
    MAX_PARAM_INDEX: int = 1000

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = DynQuerySettings()
