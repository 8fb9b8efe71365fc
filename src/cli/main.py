"""Command-line entry point (typer + rich).

Commands are thin: they parse arguments, call `PipelineClient`, and render
the result. Local argument errors exit with code 2, API/transport errors
with code 1.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.pipeline_client import PipelineClient
from cli import doctor
from cli.ui_components import (
    build_applications_table,
    build_messages_panel,
    build_pipeline_tree,
    build_pipelines_table,
)
from core.config import AppSettings
from core.domain.addresses import require_name
from core.domain.errors import InvalidArgumentError, PipelineClientError
from core.domain.models import Job, Parameter, Pipeline, Stage
from core.domain.requests import CodeFormat
from core.services.pipeline_requests import ParameterEdit, ParameterRename

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)

app = typer.Typer(no_args_is_help=True, help="Manage project pipelines through the configuration API.")
stage_app = typer.Typer(no_args_is_help=True, help="Stages of a pipeline.")
job_app = typer.Typer(no_args_is_help=True, help="Jobs of a stage.")
param_app = typer.Typer(no_args_is_help=True, help="Pipeline parameters.")
app.add_typer(stage_app, name="stage")
app.add_typer(job_app, name="job")
app.add_typer(param_app, name="param")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

_PROJECT_OPTION = typer.Option(
    ...,
    "--project",
    "-p",
    envvar="PIPELINE_CLIENT_PROJECT",
    help="Project key owning the pipeline.",
)
_FORMAT_OPTION = typer.Option(None, "--format", "-f", case_sensitive=False, help="Pipeline code format.")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, rich_tracebacks=False, show_path=False)],
        force=True,
    )


def open_client(settings: AppSettings) -> PipelineClient:
    return PipelineClient(settings)


def _call(operation: Callable[[PipelineClient], Awaitable[T]]) -> T:
    """Run one client operation and map failures to exit codes."""

    settings = AppSettings()

    async def _run() -> T:
        async with open_client(settings) as client:
            return await operation(client)

    try:
        return asyncio.run(_run())
    except PipelineClientError as exc:
        _err_console.print(f"[red]Invalid argument:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    except httpx.HTTPStatusError as exc:
        body = exc.response.text.strip()
        _err_console.print(f"[red]API error {exc.response.status_code}[/red] {exc.request.method} {exc.request.url.path}")
        if body:
            _err_console.print(body, markup=False, highlight=False)
        raise typer.Exit(code=1) from exc
    except httpx.HTTPError as exc:
        _err_console.print(f"[red]Request failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        _err_console.print(f"[red]Malformed API response:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def _model(model: type[M], **fields: object) -> M:
    """Build a domain model from command-line values."""

    try:
        return model.model_validate(fields)
    except ValidationError as exc:
        error = exc.errors()[0]
        argument = ".".join(str(part) for part in error["loc"]) or model.__name__
        value = fields.get(argument, error.get("input"))
        raise InvalidArgumentError(argument, value, error["msg"]) from exc


def _read_code(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise typer.BadParameter(f"cannot read {path}: {exc}") from exc


def _find_stage(pipeline: Pipeline, stage_id: int) -> Stage:
    stage = pipeline.stage(stage_id)
    if stage is None:
        _err_console.print(f"[red]Stage {stage_id} not found in {pipeline.name}[/red]")
        raise typer.Exit(code=1)
    return stage


def _find_job(stage: Stage, action_id: int) -> Job:
    for job in stage.jobs:
        if job.pipeline_action_id == action_id:
            return job
    _err_console.print(f"[red]Job {action_id} not found in stage {stage.id}[/red]")
    raise typer.Exit(code=1)


def _find_parameter(pipeline: Pipeline, name: str) -> Parameter:
    for parameter in pipeline.parameters:
        if parameter.name == name:
            return parameter
    _err_console.print(f"[red]Parameter {name} not found in {pipeline.name}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request."),
) -> None:
    configure_logging("DEBUG" if verbose else AppSettings().log_level)


# Pipelines


@app.command("list")
def list_command(project: str = _PROJECT_OPTION) -> None:
    """List the pipelines of a project."""

    pipelines = _call(lambda c: c.list_pipelines(project))
    _console.print(build_pipelines_table(project, pipelines))


@app.command()
def show(name: str, project: str = _PROJECT_OPTION) -> None:
    """Show a pipeline with its stages, jobs and parameters."""

    pipeline = _call(lambda c: c.get_pipeline(project, name))
    _console.print(build_pipeline_tree(pipeline))


@app.command()
def create(
    name: str,
    project: str = _PROJECT_OPTION,
    description: str = typer.Option("", "--description", "-d"),
) -> None:
    """Create an empty pipeline."""

    pipeline = _call(lambda c: c.create_pipeline(project, _model(Pipeline, name=name, description=description or None)))
    _console.print(f"[green]Created[/green] {pipeline.name}")


@app.command()
def rename(old_name: str, new_name: str, project: str = _PROJECT_OPTION) -> None:
    """Rename a pipeline."""

    async def _rename(client: PipelineClient) -> Pipeline:
        pipeline = await client.get_pipeline(project, old_name)
        pipeline.name = new_name
        return await client.update_pipeline(project, old_name, pipeline)

    pipeline = _call(_rename)
    _console.print(f"[green]Renamed[/green] {old_name} -> {pipeline.name}")


@app.command()
def delete(
    name: str,
    project: str = _PROJECT_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Delete a pipeline."""

    if not yes:
        typer.confirm(f"Delete pipeline {name} of {project}?", abort=True)
    _call(lambda c: c.delete_pipeline(project, name))
    _console.print(f"[green]Deleted[/green] {name}")


@app.command()
def applications(name: str, project: str = _PROJECT_OPTION) -> None:
    """List the applications using a pipeline."""

    apps = _call(lambda c: c.list_applications(project, name))
    _console.print(build_applications_table(name, apps))


@app.command()
def rollback(name: str, audit_id: int, project: str = _PROJECT_OPTION) -> None:
    """Restore a pipeline to an audited revision."""

    pipeline = _call(lambda c: c.rollback_pipeline(project, name, audit_id))
    _console.print(build_pipeline_tree(pipeline))


# Pipeline as code


@app.command("export")
def export_command(
    name: str,
    project: str = _PROJECT_OPTION,
    code_format: Optional[CodeFormat] = _FORMAT_OPTION,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to a file instead of stdout."),
) -> None:
    """Export a pipeline as code."""

    code = _call(lambda c: c.export_pipeline(project, name, code_format=code_format))
    if output is None:
        typer.echo(code, nl=not code.endswith("\n"))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(code, encoding="utf-8")
    _console.print(f"[green]Exported[/green] {name} to {output}")


@app.command("import")
def import_command(
    file: Path = typer.Argument(..., help="Pipeline code to import."),
    project: str = _PROJECT_OPTION,
    name: str = typer.Option("", "--name", "-n", help="Replace this pipeline instead of creating one."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing pipeline."),
    code_format: Optional[CodeFormat] = _FORMAT_OPTION,
) -> None:
    """Import a pipeline from code (create, or replace with --name)."""

    code = _read_code(file)
    messages = _call(lambda c: c.import_pipeline(project, name or None, code, force=force, code_format=code_format))
    _console.print(build_messages_panel("Import", messages))


@app.command()
def preview(
    file: Path = typer.Argument(..., help="Pipeline code to parse."),
    project: str = _PROJECT_OPTION,
    code_format: Optional[CodeFormat] = _FORMAT_OPTION,
) -> None:
    """Parse pipeline code without saving it."""

    code = _read_code(file)
    pipeline = _call(lambda c: c.preview_import(project, code, code_format=code_format))
    _console.print(build_pipeline_tree(pipeline))


# Stages


@stage_app.command("add")
def stage_add(
    pipeline_name: str,
    name: str,
    project: str = _PROJECT_OPTION,
    build_order: int = typer.Option(0, "--build-order", min=0),
    enabled: bool = typer.Option(True, "--enabled/--disabled"),
) -> None:
    """Insert a stage."""

    pipeline = _call(
        lambda c: c.insert_stage(
            project, pipeline_name, _model(Stage, name=name, build_order=build_order, enabled=enabled)
        )
    )
    _console.print(build_pipeline_tree(pipeline))


@stage_app.command("update")
def stage_update(
    pipeline_name: str,
    stage_id: int,
    project: str = _PROJECT_OPTION,
    name: Optional[str] = typer.Option(None, "--name"),
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled"),
) -> None:
    """Rename or enable/disable a stage."""

    async def _update(client: PipelineClient) -> Pipeline:
        stage = _find_stage(await client.get_pipeline(project, pipeline_name), stage_id)
        if name is not None:
            stage.name = name
        if enabled is not None:
            stage.enabled = enabled
        return await client.update_stage(project, pipeline_name, stage)

    _console.print(build_pipeline_tree(_call(_update)))


@stage_app.command("move")
def stage_move(
    pipeline_name: str,
    stage_id: int,
    build_order: int,
    project: str = _PROJECT_OPTION,
) -> None:
    """Move a stage to another position."""

    async def _move(client: PipelineClient) -> Pipeline:
        stage = _find_stage(await client.get_pipeline(project, pipeline_name), stage_id)
        stage.build_order = build_order
        return await client.move_stage(project, pipeline_name, stage)

    _console.print(build_pipeline_tree(_call(_move)))


@stage_app.command("delete")
def stage_delete(pipeline_name: str, stage_id: int, project: str = _PROJECT_OPTION) -> None:
    """Delete a stage and its jobs."""

    pipeline = _call(lambda c: c.delete_stage(project, pipeline_name, _model(Stage, id=stage_id)))
    _console.print(build_pipeline_tree(pipeline))


# Jobs


@job_app.command("add")
def job_add(
    pipeline_name: str,
    stage_id: int,
    job_name: str,
    project: str = _PROJECT_OPTION,
    enabled: bool = typer.Option(True, "--enabled/--disabled"),
) -> None:
    """Add a job to a stage."""

    pipeline = _call(
        lambda c: c.add_job(project, pipeline_name, stage_id, _model(Job, enabled=enabled, action={"name": job_name}))
    )
    _console.print(build_pipeline_tree(pipeline))


@job_app.command("update")
def job_update(
    pipeline_name: str,
    stage_id: int,
    action_id: int,
    project: str = _PROJECT_OPTION,
    name: Optional[str] = typer.Option(None, "--name"),
    enabled: Optional[bool] = typer.Option(None, "--enabled/--disabled"),
) -> None:
    """Rename or enable/disable a job."""

    async def _update(client: PipelineClient) -> Pipeline:
        stage = _find_stage(await client.get_pipeline(project, pipeline_name), stage_id)
        job = _find_job(stage, action_id)
        if name is not None:
            job.action["name"] = name
        if enabled is not None:
            job.enabled = enabled
        return await client.update_job(project, pipeline_name, stage_id, job)

    _console.print(build_pipeline_tree(_call(_update)))


@job_app.command("delete")
def job_delete(pipeline_name: str, stage_id: int, action_id: int, project: str = _PROJECT_OPTION) -> None:
    """Delete a job."""

    pipeline = _call(lambda c: c.delete_job(project, pipeline_name, stage_id, _model(Job, pipeline_action_id=action_id)))
    _console.print(build_pipeline_tree(pipeline))


# Parameters


@param_app.command("add")
def param_add(
    pipeline_name: str,
    name: str,
    project: str = _PROJECT_OPTION,
    param_type: str = typer.Option("string", "--type", "-t"),
    value: str = typer.Option("", "--value"),
    description: str = typer.Option("", "--description", "-d"),
) -> None:
    """Add a parameter."""

    pipeline = _call(
        lambda c: c.add_parameter(
            project,
            pipeline_name,
            _model(Parameter, name=name, type=param_type, value=value, description=description),
        )
    )
    _console.print(build_pipeline_tree(pipeline))


@param_app.command("update")
def param_update(
    pipeline_name: str,
    name: str,
    project: str = _PROJECT_OPTION,
    rename_from: Optional[str] = typer.Option(None, "--rename-from", help="Current name when renaming to NAME."),
    param_type: Optional[str] = typer.Option(None, "--type", "-t"),
    value: Optional[str] = typer.Option(None, "--value"),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
) -> None:
    """Update a parameter, renaming it with --rename-from.

    Fields not given on the command line keep their stored value.
    """

    async def _update(client: PipelineClient) -> Pipeline:
        require_name("name", name)
        current_name = rename_from or name
        current = _find_parameter(await client.get_pipeline(project, pipeline_name), current_name)
        fields = current.model_dump()
        fields["name"] = name
        if param_type is not None:
            fields["type"] = param_type
        if value is not None:
            fields["value"] = value
        if description is not None:
            fields["description"] = description
        parameter = _model(Parameter, **fields)
        if rename_from is None:
            change: ParameterEdit | ParameterRename = ParameterEdit(parameter=parameter)
        else:
            change = ParameterRename(previous_name=rename_from, parameter=parameter)
        return await client.update_parameter(project, pipeline_name, change)

    pipeline = _call(_update)
    _console.print(build_pipeline_tree(pipeline))


@param_app.command("delete")
def param_delete(pipeline_name: str, name: str, project: str = _PROJECT_OPTION) -> None:
    """Delete a parameter."""

    pipeline = _call(lambda c: c.delete_parameter(project, pipeline_name, _model(Parameter, name=name)))
    _console.print(build_pipeline_tree(pipeline))


def run() -> None:
    app()


if __name__ == "__main__":
    run()
