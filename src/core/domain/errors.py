"""Errors raised by the client layer itself.

Server and transport failures are not represented here: they surface as the
httpx exceptions that produced them.
"""

from __future__ import annotations


class PipelineClientError(Exception):
    """Base class for failures detected locally, before any request is sent."""


class InvalidArgumentError(PipelineClientError, ValueError):
    """An identifier needed to build a resource address is missing or malformed."""

    def __init__(self, argument: str, value: object, reason: str) -> None:
        self.argument = argument
        self.value = value
        self.reason = reason
        super().__init__(f"invalid {argument}={value!r}: {reason}")
