"""
app/validators/mapping_validator.py

Validation for header-to-field mapping resolution.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Any, Mapping, Sequence


@dataclass(frozen=True)
class MappingErrorDetail:
    """
    Structured mapping error detail.
    """

    code: str
    message: str
    field: str | None = None
    source_column: str | None = None
    context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
            "source_column": self.source_column,
            "context": self.context,
        }


class SchemaMappingError(ValueError):
    """
    Raised when a header mapping cannot be resolved safely.
    """

    def __init__(self, *, message: str, errors: Sequence[MappingErrorDetail]) -> None:
        super().__init__(message)
        self.message = message
        self.errors = tuple(errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "errors": [error.to_dict() for error in self.errors],
        }


class MappingValidator:
    """
    Validates resolved field-to-header mappings.
    """

    def __init__(
        self,
        *,
        required_fields: Sequence[str],
        known_fields: Sequence[str],
    ) -> None:
        self._required_fields = tuple(required_fields)
        self._known_fields = tuple(known_fields)
        self._known_set = set(self._known_fields)

    @property
    def required_fields(self) -> tuple[str, ...]:
        return self._required_fields

    def collect_errors(
        self,
        *,
        mapping: Mapping[str, str],
        source_headers: Sequence[str],
    ) -> list[MappingErrorDetail]:
        """
        Return every problem with ``mapping`` without raising.
        """

        errors: list[MappingErrorDetail] = []
        headers_set = set(source_headers)

        for field_name, source_column in mapping.items():
            if field_name not in self._known_set:
                errors.append(
                    MappingErrorDetail(
                        code="unknown_field",
                        message="Unknown field in mapping.",
                        field=field_name,
                        source_column=source_column,
                    )
                )
            if source_column not in headers_set:
                errors.append(
                    MappingErrorDetail(
                        code="unknown_source_column",
                        message="Mapped source column does not exist in CSV headers.",
                        field=field_name,
                        source_column=source_column,
                    )
                )

        reused = [column for column, uses in Counter(mapping.values()).items() if uses > 1]
        for column in sorted(reused):
            errors.append(
                MappingErrorDetail(
                    code="duplicate_source_column",
                    message="Each field must map to a unique header.",
                    source_column=column,
                    context={
                        "fields": sorted(name for name, value in mapping.items() if value == column)
                    },
                )
            )

        for required in self._required_fields:
            if required not in mapping:
                errors.append(
                    MappingErrorDetail(
                        code="required_field_unmapped",
                        message="Required field is not mapped.",
                        field=required,
                        context={"source_headers": list(source_headers)},
                    )
                )
        return errors

    def validate(
        self,
        *,
        mapping: Mapping[str, str],
        source_headers: Sequence[str],
        pre_errors: Sequence[MappingErrorDetail] | None = None,
    ) -> None:
        """
        Validate mapping and raise structured errors if invalid.
        """

        errors: list[MappingErrorDetail] = list(pre_errors or [])
        errors.extend(self.collect_errors(mapping=mapping, source_headers=source_headers))

        if errors:
            missing_required = [
                error.field
                for error in errors
                if error.code == "required_field_unmapped" and error.field
            ]
            missing_csv = ", ".join(sorted(set(missing_required))) or "none"
            raise SchemaMappingError(
                message=f"Header mapping validation failed. Missing required fields: {missing_csv}.",
                errors=errors,
            )
