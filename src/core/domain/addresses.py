"""Resource addresses.

Rules:
- An address is its parent's address plus one local identifier.
- No entity is addressable without its full ancestor chain.
- Identifiers are validated here, before any request exists.
"""

from __future__ import annotations

from urllib.parse import quote

from core.domain.errors import InvalidArgumentError


def require_name(argument: str, value: object) -> str:
    """Validate a textual identifier and return it unchanged."""

    if not isinstance(value, str):
        raise InvalidArgumentError(argument, value, "expected a string")
    if not value.strip():
        raise InvalidArgumentError(argument, value, "must not be empty")
    return value


def require_id(argument: str, value: object) -> int:
    """Validate a numeric identifier (non-negative int, bools rejected)."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(argument, value, "expected an integer")
    if value < 0:
        raise InvalidArgumentError(argument, value, "must not be negative")
    return value


def _segment(value: str | int) -> str:
    return quote(str(value), safe="")


def project_address(project_key: str) -> str:
    return "/project/" + _segment(require_name("project_key", project_key))


def pipeline_collection(project_key: str) -> str:
    return project_address(project_key) + "/pipeline"


def pipeline_address(project_key: str, pipeline_name: str) -> str:
    return pipeline_collection(project_key) + "/" + _segment(require_name("pipeline_name", pipeline_name))


def stage_collection(project_key: str, pipeline_name: str) -> str:
    return pipeline_address(project_key, pipeline_name) + "/stage"


def stage_address(project_key: str, pipeline_name: str, stage_id: int) -> str:
    return stage_collection(project_key, pipeline_name) + "/" + _segment(require_id("stage_id", stage_id))


def job_collection(project_key: str, pipeline_name: str, stage_id: int) -> str:
    return stage_address(project_key, pipeline_name, stage_id) + "/job"


def job_address(project_key: str, pipeline_name: str, stage_id: int, action_id: int) -> str:
    return job_collection(project_key, pipeline_name, stage_id) + "/" + _segment(require_id("action_id", action_id))


def parameter_address(project_key: str, pipeline_name: str, parameter_name: str) -> str:
    return (
        pipeline_address(project_key, pipeline_name)
        + "/parameter/"
        + _segment(require_name("parameter_name", parameter_name))
    )


def rollback_address(project_key: str, pipeline_name: str, audit_id: int) -> str:
    return pipeline_address(project_key, pipeline_name) + "/rollback/" + _segment(require_id("audit_id", audit_id))


def import_address(project_key: str, pipeline_name: str | None = None) -> str:
    base = project_address(project_key) + "/import/pipeline"
    if pipeline_name is None:
        return base
    return base + "/" + _segment(require_name("pipeline_name", pipeline_name))


def preview_address(project_key: str) -> str:
    return project_address(project_key) + "/preview/pipeline"


def export_address(project_key: str, pipeline_name: str) -> str:
    return project_address(project_key) + "/export/pipeline/" + _segment(require_name("pipeline_name", pipeline_name))
