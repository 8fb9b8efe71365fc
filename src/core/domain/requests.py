"""Request descriptors.

A descriptor is everything the transport needs to issue one call, plus the
shape the caller expects back. Building one performs no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel


class CodeFormat(str, Enum):
    """Textual formats the backend accepts for pipeline-as-code."""

    YAML = "yaml"
    JSON = "json"

    @property
    def content_type(self) -> str:
        return "application/x-yaml" if self is CodeFormat.YAML else "application/json"


class ResponseKind(str, Enum):
    MODEL = "model"
    MODEL_LIST = "model_list"
    STRING_LIST = "string_list"
    TEXT = "text"
    SUCCESS = "success"


@dataclass(frozen=True)
class RequestDescriptor:
    method: str
    path: str
    expect: ResponseKind
    model: type[BaseModel] | None = None
    params: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None
    content: str | None = None

    @property
    def has_body(self) -> bool:
        return self.json is not None or self.content is not None
