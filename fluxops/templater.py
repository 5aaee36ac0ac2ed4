"""Render ``$Name`` templates with a value map and write the result."""

from __future__ import annotations

from pathlib import Path
from string import Template

from fluxops.errors import ManifestGenerationError
from fluxops.filewriter import FileWriter


class Templater:
    """Render templates through a :class:`FileWriter`."""

    def __init__(self, writer: FileWriter) -> None:
        self.writer = writer

    @staticmethod
    def render(template: str, values: dict[str, str] | None = None) -> str:
        """Substitute *values* into *template*.

        Raises :class:`ManifestGenerationError` if a placeholder has no value.
        """
        try:
            return Template(template).substitute(values or {})
        except (KeyError, ValueError) as exc:
            raise ManifestGenerationError(f"rendering template: missing or invalid value {exc}") from exc

    def write_to_file(
        self,
        template: str,
        values: dict[str, str] | None,
        file_name: str,
        persistent: bool = True,
    ) -> Path:
        """Render *template* and write it as *file_name*; return the file path."""
        content = self.render(template, values)
        try:
            return self.writer.write(file_name, content, persistent=persistent)
        except OSError as exc:
            raise ManifestGenerationError(
                f"writing {file_name} into {self.writer.dir}: {exc}"
            ) from exc
