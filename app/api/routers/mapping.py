"""
app/api/routers/mapping.py

Header mapping suggestion and named mapping presets.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_mapping_preset_service, get_optional_db
from app.mappers.field_mapper import MappingResolution, OrderFieldMapper
from app.schemas.mapping import (
    ApplyPresetRequest,
    MappingErrorResponse,
    MappingPresetListResponse,
    MappingPresetRequest,
    MappingPresetResponse,
    MappingResolutionResponse,
    MappingSuggestRequest,
)
from app.services.mapping_preset_service import (
    InvalidPresetNameError,
    MappingPreset,
    MappingPresetNotFoundError,
    MappingPresetService,
)

router = APIRouter(tags=["mapping"])

_mapper = OrderFieldMapper()


@router.post("/mapping/suggest", response_model=MappingResolutionResponse)
def suggest_mapping(body: MappingSuggestRequest) -> MappingResolutionResponse:
    """
    Suggest a field -> header mapping for one file's headers.
    """

    return _to_response(_mapper.suggest(body.headers, overrides=body.overrides))


@router.get("/mapping-presets", response_model=MappingPresetListResponse)
def list_presets(
    service: MappingPresetService = Depends(get_mapping_preset_service),
) -> MappingPresetListResponse:
    return MappingPresetListResponse(namespace=service.namespace, names=service.list_names())


@router.get("/mapping-presets/{name}", response_model=MappingPresetResponse)
def get_preset(
    name: str,
    service: MappingPresetService = Depends(get_mapping_preset_service),
) -> MappingPresetResponse:
    try:
        preset = service.load(name)
    except InvalidPresetNameError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except MappingPresetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _preset_response(preset, service.namespace)


@router.put("/mapping-presets/{name}", response_model=MappingPresetResponse)
def save_preset(
    name: str,
    body: MappingPresetRequest,
    db: Session | None = Depends(get_optional_db),
    service: MappingPresetService = Depends(get_mapping_preset_service),
) -> MappingPresetResponse:
    try:
        preset = service.save(name, mapping=body.mapping, headers=body.headers)
    except InvalidPresetNameError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if db is not None:
        db.commit()
    return _preset_response(preset, service.namespace)


@router.delete("/mapping-presets/{name}", status_code=status.HTTP_204_NO_CONTENT)
def delete_preset(
    name: str,
    db: Session | None = Depends(get_optional_db),
    service: MappingPresetService = Depends(get_mapping_preset_service),
) -> None:
    try:
        service.delete(name)
    except InvalidPresetNameError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except MappingPresetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if db is not None:
        db.commit()


@router.post("/mapping-presets/{name}/apply", response_model=MappingResolutionResponse)
def apply_preset(
    name: str,
    body: ApplyPresetRequest,
    service: MappingPresetService = Depends(get_mapping_preset_service),
) -> MappingResolutionResponse:
    """
    Re-apply a saved preset to a new file's headers.
    """

    try:
        resolution = service.apply(name, body.headers)
    except InvalidPresetNameError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except MappingPresetNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_response(resolution)


def _to_response(resolution: MappingResolution) -> MappingResolutionResponse:
    return MappingResolutionResponse(
        mapping=resolution.field_to_source,
        strategies=resolution.match_strategies,
        unmapped_fields=list(resolution.unmapped_fields),
        missing_preset_headers=list(resolution.missing_preset_headers),
        errors=[MappingErrorResponse(**error.to_dict()) for error in resolution.errors],
        is_valid=resolution.is_valid,
    )


def _preset_response(preset: MappingPreset, namespace: str) -> MappingPresetResponse:
    return MappingPresetResponse(
        name=preset.name,
        namespace=namespace,
        mapping=preset.mapping,
        headers=preset.headers,
    )
