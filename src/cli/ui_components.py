"""UI components for the CLI (Rich).

Keeps table/tree layout out of the command functions.
"""

from __future__ import annotations

from typing import Iterable

from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from core.domain.models import Application, Pipeline


def build_pipelines_table(project_key: str, pipelines: Iterable[Pipeline]) -> Table:
    table = Table(title=f"Pipelines of {project_key}")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Stages", style="white", justify="right")
    table.add_column("Parameters", style="white", justify="right")
    table.add_column("Description", style="dim")
    for pipeline in pipelines:
        table.add_row(
            pipeline.name,
            str(len(pipeline.stages)),
            str(len(pipeline.parameters)),
            pipeline.description or "",
        )
    return table


def build_applications_table(pipeline_name: str, applications: Iterable[Application]) -> Table:
    table = Table(title=f"Applications using {pipeline_name}")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Project", style="white")
    for application in applications:
        table.add_row(
            "" if application.id is None else str(application.id),
            application.name,
            application.project_key or "",
        )
    return table


def build_pipeline_tree(pipeline: Pipeline) -> Tree:
    """Stages (in build order) with their jobs, then parameters."""

    tree = Tree(Text(pipeline.name, style="bold cyan"))
    stages = tree.add(Text("Stages", style="bold"))
    for stage in pipeline.ordered_stages():
        label = f"[{stage.build_order}] {stage.name or '(unnamed)'}  id={stage.id}"
        node = stages.add(Text(label, style="white" if stage.enabled else "dim"))
        for job in stage.jobs:
            job_label = f"{job.name or '(unnamed job)'}  action_id={job.pipeline_action_id}"
            node.add(Text(job_label, style="green" if job.enabled else "dim"))

    if pipeline.parameters:
        params = tree.add(Text("Parameters", style="bold"))
        for parameter in pipeline.parameters:
            wire = parameter.to_wire()
            params.add(Text(f"{parameter.name} ({parameter.type}) = {wire['value']!r}"))

    if pipeline.usage:
        usage = tree.add(Text("Usage", style="bold"))
        for kind, items in sorted(pipeline.usage.items()):
            count = len(items) if isinstance(items, list) else 0
            usage.add(f"{kind}: {count}")
    return tree


def build_messages_panel(title: str, messages: Iterable[str]) -> Panel:
    body = Text()
    lines = list(messages)
    if not lines:
        body.append("(no messages)", style="dim")
    for line in lines:
        body.append(f"- {line}\n")
    return Panel(body, title=Text(title, style="bold yellow"), border_style="yellow")
