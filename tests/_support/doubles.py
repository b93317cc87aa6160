"""Test doubles for drivers and loggers."""

from __future__ import annotations

from typing import Any


class StubDriver:
    """Driver double returning canned responses and recording calls.

    A response that is an exception instance is raised instead of returned.
    """

    def __init__(self, responses: dict[str, Any] | None = None, label: str = "stub", **config: Any):
        self.responses = responses or {}
        self.label = label
        self.config = config
        self.calls: list[tuple[str, tuple, dict]] = []

    def execute(self, command: str, *args: Any, **kwargs: Any) -> Any:
        self.calls.append((command, args, kwargs))
        response = self.responses.get(command)
        if isinstance(response, Exception):
            raise response
        return response

    def transactional(self, operation):
        return operation(self)


class RecordingLogger:
    """Logger double capturing debug entries.

    Every instance is tracked in ``instances`` so tests can count lazy
    default-logger creations.
    """

    instances: list[RecordingLogger] = []

    def __init__(self, connection: str = "", **options: Any):
        self.connection = connection
        self.entries: list[tuple[str, dict[str, Any]]] = []
        RecordingLogger.instances.append(self)

    def debug(self, event: str, **context: Any) -> None:
        self.entries.append((event, context))
