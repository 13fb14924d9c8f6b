"""Project documents: pydantic schema plus YAML/JSON save and load."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from ..constants import MAX_TEETH, MIN_TEETH, PROJECT_VERSION
from ..models.gear import AttachedImage, Gear, Output, OutputType
from ..models.settings import Settings
from ..models.state import SimulationState
from ..physics import propagate_speeds, rebuild_adjacency

YAML_SUFFIXES = {".yaml", ".yml"}


class _Record(BaseModel):
    """Base for stored records: camelCase on disk, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AttachedImageRecord(_Record):
    """Persisted image reference (the loaded bitmap is never stored)."""

    url: str = Field(min_length=1)
    offset_x: float = 0.0
    offset_y: float = 0.0
    scale: float = Field(default=1.0, gt=0)


class GearRecord(_Record):
    """One stored gear. Radius, speed and meshes are re-derived on load."""

    id: str = Field(min_length=1)
    x: float
    y: float
    teeth_count: int = Field(ge=MIN_TEETH, le=MAX_TEETH)
    color: str = ""
    rotation: float = 0.0
    phase_offset: float = 0.0
    attached_image: Optional[AttachedImageRecord] = None


class OutputRecord(_Record):
    """One stored output."""

    id: str = Field(min_length=1)
    type: OutputType
    x: float
    y: float
    attached_to_gear: Optional[str] = None
    color: str = ""


class ProjectDocument(_Record):
    """Top-level stored project."""

    version: str = PROJECT_VERSION
    settings: Settings = Field(default_factory=Settings)
    gears: list[GearRecord] = Field(default_factory=list)
    outputs: list[OutputRecord] = Field(default_factory=list)
    driver_gear_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_ids(self) -> "ProjectDocument":
        gear_ids = [gear.id for gear in self.gears]
        duplicates = {gid for gid in gear_ids if gear_ids.count(gid) > 1}
        if duplicates:
            raise ValueError(f"Duplicate gear ids: {sorted(duplicates)}")
        if self.driver_gear_id is not None and self.driver_gear_id not in gear_ids:
            raise ValueError(f"driverGearId {self.driver_gear_id!r} does not name a gear")
        return self

    def to_data(self) -> dict[str, Any]:
        """Plain dict with the camelCase keys used on disk."""
        return self.model_dump(mode="json", by_alias=True)


def serialize_project(state: SimulationState) -> ProjectDocument:
    """Snapshot the persistent parts of a simulation state."""
    gears = []
    for gear in state.gears:
        image = None
        if gear.attached_image is not None:
            image = AttachedImageRecord(
                url=gear.attached_image.url,
                offset_x=gear.attached_image.offset_x,
                offset_y=gear.attached_image.offset_y,
                scale=gear.attached_image.scale,
            )
        gears.append(
            GearRecord(
                id=gear.id,
                x=gear.x,
                y=gear.y,
                teeth_count=gear.teeth_count,
                color=gear.color,
                rotation=gear.rotation,
                phase_offset=gear.phase_offset,
                attached_image=image,
            )
        )

    outputs = [
        OutputRecord(
            id=output.id,
            type=output.type,
            x=output.x,
            y=output.y,
            attached_to_gear=output.attached_to_gear,
            color=output.color,
        )
        for output in state.outputs
    ]

    return ProjectDocument(
        version=PROJECT_VERSION,
        settings=state.settings.model_copy(),
        gears=gears,
        outputs=outputs,
        driver_gear_id=state.driver_gear_id,
    )


def apply_project(state: SimulationState, document: ProjectDocument) -> SimulationState:
    """Replace ``state``'s contents with a loaded document.

    Meshes, phases, speeds and lock state are rebuilt from positions; none
    of them are trusted from storage.
    """
    state.settings = document.settings.model_copy()
    state.gears = [
        Gear(
            id=record.id,
            x=record.x,
            y=record.y,
            teeth_count=record.teeth_count,
            color=record.color,
            rotation=record.rotation,
            phase_offset=record.phase_offset,
            attached_image=(
                AttachedImage(**record.attached_image.model_dump())
                if record.attached_image is not None
                else None
            ),
        )
        for record in document.gears
    ]
    state.outputs = [
        Output(
            id=record.id,
            type=record.type,
            x=record.x,
            y=record.y,
            attached_to_gear=record.attached_to_gear,
            color=record.color,
        )
        for record in document.outputs
    ]
    state.driver_gear_id = document.driver_gear_id
    state.selected_gear_id = None
    state.selected_output_id = None
    state.is_playing = False
    state.load_percentage = 0.0

    rebuild_adjacency(state)
    if state.driver_gear_id is None:
        propagate_speeds(state)
    state.dirty = False
    return state


def read_project(path: Path) -> ProjectDocument:
    """Parse and validate a project file (YAML or JSON by suffix)."""
    path = Path(path)
    with open(path) as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(f)
        else:
            data = json.load(f)
    return ProjectDocument.model_validate(data or {})


def load_project(path: Path, state: Optional[SimulationState] = None) -> SimulationState:
    """Read a project file into ``state`` (or a fresh state)."""
    document = read_project(path)
    return apply_project(state or SimulationState(), document)


def save_project(state: SimulationState, path: Path) -> Path:
    """Write ``state`` to ``path`` and clear its dirty flag."""
    path = Path(path)
    data = serialize_project(state).to_data()

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        if path.suffix.lower() in YAML_SUFFIXES:
            yaml.safe_dump(data, f, sort_keys=False)
        else:
            json.dump(data, f, indent=2)

    state.dirty = False
    return path
