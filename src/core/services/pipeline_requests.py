"""Translation from pipeline operations to request descriptors.

One builder per operation. Builders are pure: the same arguments always give
the same descriptor, and invalid identifiers raise `InvalidArgumentError`
before anything is sent.

Protocol notes:
- Structured operations send and receive JSON.
- Import and preview send raw pipeline code; the format is declared both in
  the `format` query parameter and in `Content-Type`.
- Export answers with raw text that must not be parsed, even when it is JSON.
- Stage, job and parameter mutations answer with the whole updated pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.domain import addresses
from core.domain.errors import InvalidArgumentError
from core.domain.models import Application, Job, Parameter, Pipeline, Stage
from core.domain.requests import CodeFormat, RequestDescriptor, ResponseKind

WITH_USAGE_PARAMS = {
    "withApplications": "true",
    "withWorkflows": "true",
    "withEnvironments": "true",
}


@dataclass(frozen=True)
class ParameterEdit:
    """Update a parameter in place: addressed by its current name."""

    parameter: Parameter

    @property
    def target(self) -> str:
        return self.parameter.name


@dataclass(frozen=True)
class ParameterRename:
    """Update a parameter under a new name: addressed by the old one."""

    previous_name: str
    parameter: Parameter

    @property
    def target(self) -> str:
        return self.previous_name


ParameterChange = ParameterEdit | ParameterRename


def parameter_change(parameter: Parameter) -> ParameterChange:
    """Derive the update variant from a parameter carrying `previous_name`."""

    if parameter.previous_name:
        return ParameterRename(previous_name=parameter.previous_name, parameter=parameter)
    return ParameterEdit(parameter=parameter)


# Pipelines


def list_pipelines(project_key: str) -> RequestDescriptor:
    return RequestDescriptor(
        method="GET",
        path=addresses.pipeline_collection(project_key),
        expect=ResponseKind.MODEL_LIST,
        model=Pipeline,
    )


def get_pipeline(project_key: str, pipeline_name: str) -> RequestDescriptor:
    return RequestDescriptor(
        method="GET",
        path=addresses.pipeline_address(project_key, pipeline_name),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        params=dict(WITH_USAGE_PARAMS),
    )


def create_pipeline(project_key: str, pipeline: Pipeline) -> RequestDescriptor:
    return RequestDescriptor(
        method="POST",
        path=addresses.pipeline_collection(project_key),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=pipeline.to_wire(),
    )


def update_pipeline(project_key: str, old_name: str, pipeline: Pipeline) -> RequestDescriptor:
    """PUT on the old name; the body may carry a new one."""

    return RequestDescriptor(
        method="PUT",
        path=addresses.pipeline_address(project_key, old_name),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=pipeline.to_wire(),
    )


def delete_pipeline(project_key: str, pipeline_name: str) -> RequestDescriptor:
    return RequestDescriptor(
        method="DELETE",
        path=addresses.pipeline_address(project_key, pipeline_name),
        expect=ResponseKind.SUCCESS,
    )


def rollback_pipeline(project_key: str, pipeline_name: str, audit_id: int) -> RequestDescriptor:
    return RequestDescriptor(
        method="POST",
        path=addresses.rollback_address(project_key, pipeline_name, audit_id),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json={},
    )


def list_applications(project_key: str, pipeline_name: str) -> RequestDescriptor:
    return RequestDescriptor(
        method="GET",
        path=addresses.pipeline_address(project_key, pipeline_name) + "/application",
        expect=ResponseKind.MODEL_LIST,
        model=Application,
    )


# Pipeline as code


def _code_params(code_format: CodeFormat) -> dict[str, str]:
    return {"format": CodeFormat(code_format).value}


def _code_headers(code_format: CodeFormat) -> dict[str, str]:
    return {"Content-Type": CodeFormat(code_format).content_type}


def _require_code(code: object) -> str:
    if not isinstance(code, str):
        raise InvalidArgumentError("code", code, "expected pipeline code as text")
    return code


def _import_request(
    project_key: str,
    pipeline_name: str | None,
    code: str,
    *,
    force: bool,
    code_format: CodeFormat,
) -> RequestDescriptor:
    # POST on the collection creates, PUT on the named address replaces.
    method = "POST" if pipeline_name is None else "PUT"
    params = _code_params(code_format)
    if force:
        params["forceUpdate"] = "true"
    return RequestDescriptor(
        method=method,
        path=addresses.import_address(project_key, pipeline_name),
        expect=ResponseKind.STRING_LIST,
        params=params,
        headers=_code_headers(code_format),
        content=_require_code(code),
    )


def create_from_import(
    project_key: str,
    code: str,
    *,
    force: bool = False,
    code_format: CodeFormat = CodeFormat.YAML,
) -> RequestDescriptor:
    return _import_request(project_key, None, code, force=force, code_format=code_format)


def replace_from_import(
    project_key: str,
    pipeline_name: str,
    code: str,
    *,
    force: bool = False,
    code_format: CodeFormat = CodeFormat.YAML,
) -> RequestDescriptor:
    addresses.require_name("pipeline_name", pipeline_name)
    return _import_request(project_key, pipeline_name, code, force=force, code_format=code_format)


def import_pipeline(
    project_key: str,
    pipeline_name: str | None,
    code: str,
    *,
    force: bool = False,
    code_format: CodeFormat = CodeFormat.YAML,
) -> RequestDescriptor:
    """Create when no name is given (None or ""), replace otherwise."""

    if not pipeline_name:
        return create_from_import(project_key, code, force=force, code_format=code_format)
    return replace_from_import(project_key, pipeline_name, code, force=force, code_format=code_format)


def preview_import(
    project_key: str,
    code: str,
    *,
    code_format: CodeFormat = CodeFormat.YAML,
) -> RequestDescriptor:
    return RequestDescriptor(
        method="POST",
        path=addresses.preview_address(project_key),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        params=_code_params(code_format),
        headers=_code_headers(code_format),
        content=_require_code(code),
    )


def export_pipeline(
    project_key: str,
    pipeline_name: str,
    *,
    code_format: CodeFormat = CodeFormat.YAML,
) -> RequestDescriptor:
    params = _code_params(code_format)
    params["withPermissions"] = "true"
    return RequestDescriptor(
        method="GET",
        path=addresses.export_address(project_key, pipeline_name),
        expect=ResponseKind.TEXT,
        params=params,
        headers={"Accept": "*/*"},
    )


# Stages


def _stage_id(stage: Stage) -> int:
    return addresses.require_id("stage.id", stage.id)


def insert_stage(project_key: str, pipeline_name: str, stage: Stage) -> RequestDescriptor:
    return RequestDescriptor(
        method="POST",
        path=addresses.stage_collection(project_key, pipeline_name),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=stage.to_wire(),
    )


def update_stage(project_key: str, pipeline_name: str, stage: Stage) -> RequestDescriptor:
    return RequestDescriptor(
        method="PUT",
        path=addresses.stage_address(project_key, pipeline_name, _stage_id(stage)),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=stage.to_wire(),
    )


def delete_stage(project_key: str, pipeline_name: str, stage: Stage) -> RequestDescriptor:
    return RequestDescriptor(
        method="DELETE",
        path=addresses.stage_address(project_key, pipeline_name, _stage_id(stage)),
        expect=ResponseKind.MODEL,
        model=Pipeline,
    )


def move_stage(project_key: str, pipeline_name: str, stage: Stage) -> RequestDescriptor:
    """Reorder: the body carries the stage with its target `build_order`."""

    _stage_id(stage)
    return RequestDescriptor(
        method="POST",
        path=addresses.stage_collection(project_key, pipeline_name) + "/move",
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=stage.to_wire(),
    )


# Jobs


def _action_id(job: Job) -> int:
    return addresses.require_id("job.pipeline_action_id", job.pipeline_action_id)


def add_job(project_key: str, pipeline_name: str, stage_id: int, job: Job) -> RequestDescriptor:
    return RequestDescriptor(
        method="POST",
        path=addresses.job_collection(project_key, pipeline_name, stage_id),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=job.to_wire(),
    )


def update_job(project_key: str, pipeline_name: str, stage_id: int, job: Job) -> RequestDescriptor:
    return RequestDescriptor(
        method="PUT",
        path=addresses.job_address(project_key, pipeline_name, stage_id, _action_id(job)),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=job.to_wire(),
    )


def delete_job(project_key: str, pipeline_name: str, stage_id: int, job: Job) -> RequestDescriptor:
    return RequestDescriptor(
        method="DELETE",
        path=addresses.job_address(project_key, pipeline_name, stage_id, _action_id(job)),
        expect=ResponseKind.MODEL,
        model=Pipeline,
    )


# Parameters


def add_parameter(project_key: str, pipeline_name: str, parameter: Parameter) -> RequestDescriptor:
    return RequestDescriptor(
        method="POST",
        path=addresses.parameter_address(project_key, pipeline_name, parameter.name),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=parameter.to_wire(),
    )


def update_parameter(
    project_key: str,
    pipeline_name: str,
    change: ParameterChange | Parameter,
) -> RequestDescriptor:
    if isinstance(change, Parameter):
        change = parameter_change(change)
    return RequestDescriptor(
        method="PUT",
        path=addresses.parameter_address(project_key, pipeline_name, change.target),
        expect=ResponseKind.MODEL,
        model=Pipeline,
        json=change.parameter.to_wire(),
    )


def delete_parameter(project_key: str, pipeline_name: str, parameter: Parameter) -> RequestDescriptor:
    return RequestDescriptor(
        method="DELETE",
        path=addresses.parameter_address(project_key, pipeline_name, parameter.name),
        expect=ResponseKind.MODEL,
        model=Pipeline,
    )
