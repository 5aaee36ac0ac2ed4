"""Write generated files into the configuration repository working copy.

Persistent files land directly in the writer's directory and are meant to
be committed.  Temporary files go to a ``generated/`` sub-directory that
:meth:`FileWriter.clean_up_temp` removes.
"""

from __future__ import annotations

import abc
import logging
import shutil
from pathlib import Path

from fluxops.config import GENERATED_DIR

logger = logging.getLogger(__name__)


class FileWriter(abc.ABC):
    """A directory that generated files are written into."""

    @property
    @abc.abstractmethod
    def dir(self) -> Path:
        """Root directory of this writer."""

    @abc.abstractmethod
    def with_dir(self, sub_dir: str) -> FileWriter:
        """Return a writer scoped to *sub_dir*, creating it if needed."""

    @abc.abstractmethod
    def write(self, file_name: str, content: str | bytes, persistent: bool = True) -> Path:
        """Write *content* and return the path of the written file."""

    @abc.abstractmethod
    def clean_up_temp(self) -> None:
        """Remove temporary files written by this writer."""


class DirectoryWriter(FileWriter):
    """:class:`FileWriter` writing to the local filesystem.

    Parameters
    ----------
    directory:
        Root directory.  Created on first write.
    """

    def __init__(self, directory: str | Path) -> None:
        self._dir = Path(directory)

    @property
    def dir(self) -> Path:
        return self._dir

    def with_dir(self, sub_dir: str) -> DirectoryWriter:
        path = self._dir / sub_dir
        path.mkdir(parents=True, exist_ok=True)
        return DirectoryWriter(path)

    def write(self, file_name: str, content: str | bytes, persistent: bool = True) -> Path:
        folder = self._dir if persistent else self._dir / GENERATED_DIR
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / file_name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        logger.debug("Wrote %s", path)
        return path

    def clean_up_temp(self) -> None:
        shutil.rmtree(self._dir / GENERATED_DIR, ignore_errors=True)
