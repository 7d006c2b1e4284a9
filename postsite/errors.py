from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base class for every error that aborts a build run."""


class ConfigurationError(BuildError):
    pass


class ContentReadError(BuildError):
    def __init__(self, path: Path | str, reason: str = "") -> None:
        self.path = Path(path)
        message = f"Cannot read post source {self.path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RenderError(BuildError):
    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"Failed to render {name}: {reason}")


class WriteError(BuildError):
    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        super().__init__(f"Failed to write {self.path}: {reason}")
