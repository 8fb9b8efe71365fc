"""Async client for the pipeline configuration API.

Each method builds one request descriptor (`core.services.pipeline_requests`),
issues exactly one request and shapes the response. Nothing is cached or
retried; HTTP errors propagate as `httpx.HTTPStatusError`.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import Application, Job, Parameter, Pipeline, Stage
from core.domain.requests import CodeFormat, RequestDescriptor, ResponseKind
from core.services import pipeline_requests
from core.services.pipeline_requests import ParameterChange

logger = logging.getLogger(__name__)


class PipelineClient:
    """One method per pipeline operation, rooted at a project key."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._owns_http = http is None
        self._http = http if http is not None else build_async_client(self._settings)

    async def __aenter__(self) -> "PipelineClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def send(self, descriptor: RequestDescriptor) -> Any:
        """Issue the request described by `descriptor` and unwrap the response."""

        logger.debug("%s %s params=%s", descriptor.method, descriptor.path, descriptor.params)
        response = await self._http.request(
            descriptor.method,
            descriptor.path,
            params=descriptor.params or None,
            headers=descriptor.headers or None,
            json=descriptor.json,
            content=descriptor.content,
        )
        if response.is_error:
            logger.info(
                "%s %s failed with HTTP %s",
                descriptor.method,
                descriptor.path,
                response.status_code,
            )
        response.raise_for_status()
        return _unwrap(descriptor, response)

    # Pipelines

    async def list_pipelines(self, project_key: str) -> list[Pipeline]:
        return await self.send(pipeline_requests.list_pipelines(project_key))

    async def get_pipeline(self, project_key: str, pipeline_name: str) -> Pipeline:
        return await self.send(pipeline_requests.get_pipeline(project_key, pipeline_name))

    async def create_pipeline(self, project_key: str, pipeline: Pipeline) -> Pipeline:
        return await self.send(pipeline_requests.create_pipeline(project_key, pipeline))

    async def update_pipeline(self, project_key: str, old_name: str, pipeline: Pipeline) -> Pipeline:
        return await self.send(pipeline_requests.update_pipeline(project_key, old_name, pipeline))

    async def delete_pipeline(self, project_key: str, pipeline_name: str) -> bool:
        return await self.send(pipeline_requests.delete_pipeline(project_key, pipeline_name))

    async def rollback_pipeline(self, project_key: str, pipeline_name: str, audit_id: int) -> Pipeline:
        return await self.send(pipeline_requests.rollback_pipeline(project_key, pipeline_name, audit_id))

    async def list_applications(self, project_key: str, pipeline_name: str) -> list[Application]:
        return await self.send(pipeline_requests.list_applications(project_key, pipeline_name))

    # Pipeline as code

    async def create_from_import(
        self,
        project_key: str,
        code: str,
        *,
        force: bool = False,
        code_format: CodeFormat | None = None,
    ) -> list[str]:
        return await self.send(
            pipeline_requests.create_from_import(project_key, code, force=force, code_format=self._format(code_format))
        )

    async def replace_from_import(
        self,
        project_key: str,
        pipeline_name: str,
        code: str,
        *,
        force: bool = False,
        code_format: CodeFormat | None = None,
    ) -> list[str]:
        return await self.send(
            pipeline_requests.replace_from_import(
                project_key, pipeline_name, code, force=force, code_format=self._format(code_format)
            )
        )

    async def import_pipeline(
        self,
        project_key: str,
        pipeline_name: str | None,
        code: str,
        *,
        force: bool = False,
        code_format: CodeFormat | None = None,
    ) -> list[str]:
        return await self.send(
            pipeline_requests.import_pipeline(
                project_key, pipeline_name, code, force=force, code_format=self._format(code_format)
            )
        )

    async def preview_import(
        self,
        project_key: str,
        code: str,
        *,
        code_format: CodeFormat | None = None,
    ) -> Pipeline:
        return await self.send(pipeline_requests.preview_import(project_key, code, code_format=self._format(code_format)))

    async def export_pipeline(
        self,
        project_key: str,
        pipeline_name: str,
        *,
        code_format: CodeFormat | None = None,
    ) -> str:
        return await self.send(
            pipeline_requests.export_pipeline(project_key, pipeline_name, code_format=self._format(code_format))
        )

    # Stages

    async def insert_stage(self, project_key: str, pipeline_name: str, stage: Stage) -> Pipeline:
        return await self.send(pipeline_requests.insert_stage(project_key, pipeline_name, stage))

    async def update_stage(self, project_key: str, pipeline_name: str, stage: Stage) -> Pipeline:
        return await self.send(pipeline_requests.update_stage(project_key, pipeline_name, stage))

    async def delete_stage(self, project_key: str, pipeline_name: str, stage: Stage) -> Pipeline:
        return await self.send(pipeline_requests.delete_stage(project_key, pipeline_name, stage))

    async def move_stage(self, project_key: str, pipeline_name: str, stage: Stage) -> Pipeline:
        return await self.send(pipeline_requests.move_stage(project_key, pipeline_name, stage))

    # Jobs

    async def add_job(self, project_key: str, pipeline_name: str, stage_id: int, job: Job) -> Pipeline:
        return await self.send(pipeline_requests.add_job(project_key, pipeline_name, stage_id, job))

    async def update_job(self, project_key: str, pipeline_name: str, stage_id: int, job: Job) -> Pipeline:
        return await self.send(pipeline_requests.update_job(project_key, pipeline_name, stage_id, job))

    async def delete_job(self, project_key: str, pipeline_name: str, stage_id: int, job: Job) -> Pipeline:
        return await self.send(pipeline_requests.delete_job(project_key, pipeline_name, stage_id, job))

    # Parameters

    async def add_parameter(self, project_key: str, pipeline_name: str, parameter: Parameter) -> Pipeline:
        return await self.send(pipeline_requests.add_parameter(project_key, pipeline_name, parameter))

    async def update_parameter(
        self,
        project_key: str,
        pipeline_name: str,
        change: ParameterChange | Parameter,
    ) -> Pipeline:
        return await self.send(pipeline_requests.update_parameter(project_key, pipeline_name, change))

    async def delete_parameter(self, project_key: str, pipeline_name: str, parameter: Parameter) -> Pipeline:
        return await self.send(pipeline_requests.delete_parameter(project_key, pipeline_name, parameter))

    def _format(self, code_format: CodeFormat | None) -> CodeFormat:
        return code_format or self._settings.default_format


def _unwrap(descriptor: RequestDescriptor, response: httpx.Response) -> Any:
    kind = descriptor.expect
    if kind is ResponseKind.SUCCESS:
        return True
    if kind is ResponseKind.TEXT:
        return response.text

    payload = response.json()
    if kind is ResponseKind.STRING_LIST:
        return [str(item) for item in payload or []]
    if descriptor.model is None:
        raise TypeError(f"descriptor for {descriptor.path} expects {kind.value} without a model")
    if kind is ResponseKind.MODEL_LIST:
        return [descriptor.model.model_validate(item) for item in payload or []]
    return descriptor.model.model_validate(payload)
