"""Domain models (Pydantic v2).

The backend owns these entities; the client only needs the identifying
fields to build addresses. Everything else the API returns is kept as-is
(`extra="allow"`) so a read-modify-write round trip never drops data.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class _Entity(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON body sent to the API."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Job(_Entity):
    """Leaf unit of work inside a stage."""

    pipeline_action_id: int | None = Field(
        default=None,
        description="Identifier of the job inside its stage (assigned by the API).",
    )
    pipeline_stage_id: int | None = Field(
        default=None,
        description="Identifier of the owning stage.",
    )
    enabled: bool = Field(default=True)
    action: dict[str, Any] = Field(
        default_factory=dict,
        description="Opaque action definition (name, requirements, steps...).",
    )

    @property
    def name(self) -> str | None:
        value = self.action.get("name")
        return value if isinstance(value, str) else None


class Stage(_Entity):
    """Ordered group of jobs."""

    id: int | None = Field(default=None, description="Stage identifier (assigned by the API).")
    name: str = Field(default="", max_length=256)
    build_order: int = Field(default=0, ge=0, description="Position of the stage in the pipeline.")
    enabled: bool = Field(default=True)
    jobs: list[Job] = Field(default_factory=list)


class Parameter(_Entity):
    """Pipeline parameter.

    `previous_name` is client-side state: it records the name the parameter
    had before an in-progress rename. It is never serialized into a body;
    it only selects the address of an update.
    """

    name: str = Field(..., min_length=1, max_length=256)
    type: str = Field(default="string")
    value: Any = Field(default=None)
    description: str = Field(default="")
    advanced: bool = Field(default=False)
    previous_name: str | None = Field(default=None, alias="previousName", exclude=True)

    def to_wire(self) -> dict[str, Any]:
        """Normalized representation accepted by the parameter endpoints.

        The API stores every value as a string, so the value is coerced here.
        """

        if self.value is None:
            value = ""
        elif isinstance(self.value, bool):
            value = "true" if self.value else "false"
        else:
            value = str(self.value)
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "advanced": self.advanced,
            "value": value,
        }


class Application(_Entity):
    """Application consuming a pipeline (read-only here)."""

    id: int | None = None
    name: str = ""
    project_key: str | None = None


class Pipeline(_Entity):
    """Named, ordered configuration object owned by a project."""

    id: int | None = None
    name: str = Field(..., min_length=1, max_length=256)
    description: str | None = None
    project_key: str | None = None
    stages: list[Stage] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    usage: dict[str, Any] | None = Field(
        default=None,
        description="Applications/workflows/environments using the pipeline (when requested).",
    )

    def stage(self, stage_id: int) -> Stage | None:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None

    def ordered_stages(self) -> list[Stage]:
        return sorted(self.stages, key=lambda s: s.build_order)
