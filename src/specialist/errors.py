"""Exception types raised by specialist."""

from __future__ import annotations

from pathlib import Path


class SpecialistError(Exception):
    """Base exception for specialist errors."""


class TemplateLoadError(SpecialistError):
    """Raised when a template file cannot be read, parsed or validated."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load template {self.path}: {reason}")


class TemplateNotFoundError(TemplateLoadError):
    """Raised when a template path does not exist."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(
            path,
            "file not found (relative paths are resolved against the project root)",
        )


class NoUserContentError(SpecialistError):
    """Raised when a request carries no user message to compose from."""


class SelectionError(SpecialistError):
    """Raised when the prompt selection phase fails or times out."""


class ExtractionError(SpecialistError):
    """Raised when the variable extraction phase fails or times out."""


class PromptNotFoundError(SpecialistError):
    """Raised when a prompt id does not resolve to any prompt text."""

    def __init__(self, prompt_id: str, reason: str = "no matching prompt") -> None:
        self.prompt_id = prompt_id
        super().__init__(f"Prompt '{prompt_id}' not found: {reason}")


class EnrichmentDocumentError(SpecialistError):
    """Raised when a single documentation entry cannot be enriched."""

    def __init__(self, index: int, message: str) -> None:
        self.index = index
        self.message = message
        super().__init__(f"Document {index}: {message}")


class SpecialistAdapterError(SpecialistError):
    """Raised when a composed call fails, tagged with adapter identity."""

    def __init__(self, adapter_name: str, template_name: str, message: str) -> None:
        self.adapter_name = adapter_name
        self.template_name = template_name
        super().__init__(
            f"SpecialistAdapter ({adapter_name}) error for template "
            f"'{template_name}': {message}"
        )
