"""
Pydantic model for application configuration.
Provides validation for the registry location settings.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_DATABASE_NAME = "downloads.db"


class RegistryConfig(BaseModel):
    """A validated configuration model for the download registry."""

    database_name: str = DEFAULT_DATABASE_NAME
    base_dir: Path = Field(default_factory=lambda: Path.home())

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("database_name")
    @classmethod
    def validate_database_name(cls, v: str) -> str:
        """The database lives directly inside base_dir, so only a file name is accepted."""
        if not v:
            raise ValueError("Database name cannot be empty.")
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(
                f"Database name must be a plain file name, but got: {v}"
            )
        return v

    @field_validator("base_dir", mode="before")
    @classmethod
    def expand_base_dir(cls, v):
        """Expands '~' and treats an empty value as the home directory."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return Path.home()
        return Path(v).expanduser()

    @property
    def db_path(self) -> Path:
        return self.base_dir / self.database_name

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
