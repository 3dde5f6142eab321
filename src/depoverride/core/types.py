"""
Shared pydantic base for the config and report models.

Both the override config and the dotnet report are JSON documents whose
keys were historically read case-insensitively, and both tolerate
explicit nulls where a string or list is expected.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class WireModel(BaseModel):
    """
    Immutable model read from a JSON/YAML document.

    Keys are matched against field aliases case-insensitively, so
    `packageId`, `PackageId` and `packageid` all populate the same field.
    Unknown keys are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _match_keys_case_insensitively(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        known = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            known[key.casefold()] = key

        return {
            known.get(k.casefold(), k) if isinstance(k, str) else k: v
            for k, v in data.items()
        }


def blank_if_none(value: Any) -> Any:
    """Read an explicit null string as the empty string."""
    return "" if value is None else value


def empty_if_none(value: Any) -> Any:
    """Read an explicit null collection as an empty list."""
    return [] if value is None else value
