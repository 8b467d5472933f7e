"""Configuration models."""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from autopatch.exceptions import ConfigError


class SelectionMode(str, Enum):
    """How the commit range to replay is chosen."""

    BRANCH = "branch"
    COMMIT = "commit"
    HASH_RANGE = "range"


class PatcherConfig(BaseModel):
    """Parameters of one replay run, given on the command line as key=value pairs."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        json_schema_extra={
            "example": {
                "source": "/path/to/source",
                "dest": "/path/to/dest",
                "branch": "feature",
            }
        },
    )

    source: Path = Field(..., description="Path to the repository to read history from")
    dest: Optional[Path] = Field(None, description="Path to the repository to replay onto")
    branch: Optional[str] = Field(None, description="Replay the commit range of this branch")
    commit: Optional[str] = Field(None, description="Replay from this commit hash (prefix)")
    count: Optional[int] = Field(None, description="Number of commits to replay from `commit`")
    start_commit: Optional[str] = Field(None, alias="startCommit", description="First commit hash of a range")
    end_commit: Optional[str] = Field(None, alias="endCommit", description="Last commit hash of a range")
    dry_run: bool = Field(False, alias="dryRun", description="Only print the planned tasks")

    @model_validator(mode="after")
    def _check_selection(self) -> "PatcherConfig":
        modes = [self.branch is not None, self.commit is not None, self.start_commit is not None]
        if sum(modes) > 1:
            raise ValueError("Use only one of branch, commit or startCommit/endCommit")
        if (self.start_commit is None) != (self.end_commit is None):
            raise ValueError("startCommit and endCommit must be given together")
        if self.count is not None and self.commit is None:
            raise ValueError("count can only be used together with commit")
        return self

    @property
    def selection_mode(self) -> Optional[SelectionMode]:
        """The selection mode in use, or None when only branches should be listed."""
        if self.branch is not None:
            return SelectionMode.BRANCH
        if self.commit is not None:
            return SelectionMode.COMMIT
        if self.start_commit is not None:
            return SelectionMode.HASH_RANGE
        return None

    @staticmethod
    def parse_args(args: List[str]) -> Dict[str, Union[str, bool]]:
        """Turn key=value arguments into a flat mapping.

        "true" and "false" become booleans, anything else stays a string.
        Arguments without "=" are ignored.
        """
        values: Dict[str, Union[str, bool]] = {}
        for arg in args:
            key, separator, value = arg.partition("=")
            if not separator or not key:
                continue
            if value == "true":
                values[key] = True
            elif value == "false":
                values[key] = False
            else:
                values[key] = value
        return values

    @classmethod
    def from_args(cls, args: List[str]) -> "PatcherConfig":
        """Build the configuration from key=value command-line arguments.

        Raises:
            ConfigError: If required parameters are missing or conflict
        """
        values = cls.parse_args(args)
        if "source" not in values:
            raise ConfigError(f"Missing parameter in commandline (source), given parameters: {values}")
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"Invalid parameters {values}: {e}") from e


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOPATCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Single-commit patch handed from the source to the destination
    patch_file: Path = Path("tmp.patch")
