"""
app/schemas/worker_protocol.py

Inbound command schemas for the ingestion worker.
"""

from __future__ import annotations

from typing import Any, Literal, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.ingestion import DEFAULT_SAMPLE_LIMIT, MAX_SAMPLE_LIMIT


class WorkerCommandError(ValueError):
    """
    Raised when an inbound worker command is malformed.
    """


class ParseCommandOptions(BaseModel):
    """
    Options accepted with a ``parse`` command.

    ``sampleSize`` is clamped into ``1..200`` rather than rejected.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    header: bool = True
    delimiter: str | None = Field(default=None, min_length=1, max_length=1)
    sample_size: int = Field(default=DEFAULT_SAMPLE_LIMIT, alias="sampleSize")

    @field_validator("sample_size", mode="after")
    @classmethod
    def _clamp_sample_size(cls, value: int) -> int:
        return max(1, min(MAX_SAMPLE_LIMIT, value))


class ParseCommand(BaseModel):
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    command: Literal["parse"]
    source: Any = None
    options: ParseCommandOptions = Field(default_factory=ParseCommandOptions)


class CancelCommand(BaseModel):
    model_config = ConfigDict(extra="ignore")

    command: Literal["cancel"]


WorkerCommand = ParseCommand | CancelCommand


def parse_worker_command(raw: Mapping[str, Any]) -> WorkerCommand:
    """
    Validate one inbound command dict.

    Raises WorkerCommandError with a readable message for anything that is
    not a well-formed ``parse`` or ``cancel`` command.
    """

    if not isinstance(raw, Mapping):
        raise WorkerCommandError("Worker commands must be objects.")

    kind = raw.get("command")
    model: type[BaseModel]
    if kind == "parse":
        model = ParseCommand
    elif kind == "cancel":
        model = CancelCommand
    else:
        raise WorkerCommandError(f"Unsupported worker command: {kind!r}.")

    try:
        return model.model_validate(dict(raw))
    except ValueError as exc:
        raise WorkerCommandError(f"Malformed {kind} command: {_first_error(exc)}") from exc


def _first_error(exc: ValueError) -> str:
    errors = getattr(exc, "errors", None)
    if callable(errors):
        details = errors()
        if details:
            first = details[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            return f"{location}: {first.get('msg', 'invalid value')}"
    return str(exc)
