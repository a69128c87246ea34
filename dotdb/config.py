from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .crypto import KEY_SIZE


class DatabaseConfig(BaseModel):
    """
    Configuration for a Database and the collections it creates.

    strict_paths makes set() fail instead of replacing a non-object found
    in the middle of a dotted path.
    """

    model_config = ConfigDict(frozen=True)

    data_file: Path = Path("database.json")
    collections_folder: Path = Path("collections")
    auto_save: bool = True
    encryption_key: str | None = None
    tab_size: int = Field(default=2, ge=0)
    collection_timestamps: bool = False
    strict_paths: bool = False

    @field_validator("data_file")
    @classmethod
    def _json_suffix(cls, value: Path) -> Path:
        if value.suffix != ".json":
            raise ValueError("Provided path should lead to a .json file")
        return value

    @field_validator("encryption_key")
    @classmethod
    def _key_length(cls, value: str | None) -> str | None:
        if value is not None and len(value.encode("utf-8")) != KEY_SIZE:
            raise ValueError(f"The Encryption Key must have a length of {KEY_SIZE} characters")
        return value

    def collection_config(self) -> "CollectionConfig":
        return CollectionConfig(
            folder_path=self.collections_folder,
            auto_save=self.auto_save,
            tab_size=self.tab_size,
            timestamps=self.collection_timestamps,
        )


class CollectionConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    folder_path: Path = Path("collections")
    auto_save: bool = True
    tab_size: int = Field(default=0, ge=0)
    timestamps: bool = False
