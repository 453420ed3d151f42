"""Domain models for watched folders and their tool configuration.

A ``ToolConfig`` is what the user sets up per tool: which folder to watch, where
results go and which options to send with each upload. The same model is
read from the config file, so it accepts both the snake_case field names and
the camelCase keys written by the desktop app.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer


class OutputMode(BaseModel):
    """Where a processed file is written.

    Closed variant with three cases:

    - ``same-folder``: next to the input file
    - ``subfolder``: in a ``Processed`` folder next to the input file
    - ``custom``: in an absolute directory given by ``path``

    The wire form is either the bare string ``"same-folder"``/``"subfolder"``
    or the mapping ``{"custom": "/abs/dir"}``.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["same-folder", "subfolder", "custom"] = "subfolder"
    path: str | None = None

    @classmethod
    def same_folder(cls) -> OutputMode:
        return cls(kind="same-folder")

    @classmethod
    def subfolder(cls) -> OutputMode:
        return cls(kind="subfolder")

    @classmethod
    def custom(cls, path: str | Path) -> OutputMode:
        return cls(kind="custom", path=str(path))

    @classmethod
    def parse(cls, value: Any) -> OutputMode:
        """Parse the wire form of an output mode.

        Raises
        ------
        ValueError
            If the value is not one of the recognised forms
        """
        if isinstance(value, OutputMode):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-")
            if normalized in ("same-folder", "samefolder"):
                return cls.same_folder()
            if normalized == "subfolder":
                return cls.subfolder()
            raise ValueError(f"Unknown output mode: {value!r}")
        if isinstance(value, dict):
            if "custom" in value and len(value) == 1:
                return cls.custom(value["custom"])
            if "kind" in value:
                return cls.model_validate(value)
        raise ValueError(f"Unknown output mode: {value!r}")

    @field_validator("path")
    @classmethod
    def _custom_path_is_absolute(cls, v: str | None) -> str | None:
        if v is not None and not Path(v).is_absolute():
            raise ValueError(f"Custom output path must be absolute: {v}")
        return v

    @model_serializer
    def _to_wire(self) -> Any:
        if self.kind == "custom":
            return {"custom": self.path}
        return self.kind


class ToolConfig(BaseModel):
    """Per-tool processing configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1, description="Tool identifier, e.g. 'compress'")
    enabled: bool = Field(default=True)
    folder_path: str | None = Field(default=None, alias="folderPath")
    output_mode: OutputMode = Field(default_factory=OutputMode.subfolder, alias="outputMode")
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("output_mode", mode="before")
    @classmethod
    def _parse_output_mode(cls, v: Any) -> OutputMode:
        return OutputMode.parse(v)

    @field_validator("options", mode="before")
    @classmethod
    def _none_options_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    def snapshot(self) -> ToolConfig:
        """Return a deep copy safe to hand to another task."""
        return self.model_copy(deep=True)


@dataclass(frozen=True, slots=True)
class WatchedFolder:
    """A registered folder and the tool configuration that controls it."""

    path: Path
    config: ToolConfig

    @property
    def tool_id(self) -> str:
        return self.config.id


@dataclass(frozen=True, slots=True)
class FileReadyEvent:
    """A stabilized file and the tool configuration resolved for it.

    ``tool_config`` is a snapshot taken at resolution time; later registry
    updates do not affect a run that already started.
    """

    path: Path
    tool_id: str
    tool_config: ToolConfig

    @classmethod
    def for_folder(cls, path: Path, folder: WatchedFolder) -> FileReadyEvent:
        snapshot = folder.config.snapshot()
        return cls(path=path, tool_id=snapshot.id, tool_config=snapshot)
