"""
Migration version allocation.

Versions are a function of the migration scripts already present in a store,
not of in-memory run state: every allocation re-reads the store, so each
table generated in a run sees the script written for the previous table.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from ...logging_config import get_logger

logger = get_logger(__name__)

# V1 is reserved for the baseline/bootstrap migration, which is not generated here
BASELINE_VERSION = 1
VERSION_PATTERN = re.compile(r"V(\d+).*")


class MigrationStore(ABC):
    """Read/append capability over previously emitted migration scripts."""

    @abstractmethod
    def list_names(self) -> List[str]:
        """Return the file names of existing migration scripts (any order)."""
        pass

    @abstractmethod
    def write(self, name: str, content: str) -> str:
        """Persist a script and return its location."""
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove a script previously written by this store."""
        pass


class DirectoryMigrationStore(MigrationStore):
    """Migration scripts stored as files in a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def list_names(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return [p.name for p in self.directory.iterdir() if p.is_file()]

    def write(self, name: str, content: str) -> str:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    def delete(self, name: str) -> None:
        path = self.directory / name
        if path.exists():
            path.unlink()


class InMemoryMigrationStore(MigrationStore):
    """Migration scripts kept in a dict. Useful for tests and dry runs."""

    def __init__(self, existing: Optional[Iterable[str]] = None):
        self.scripts: Dict[str, str] = {name: "" for name in (existing or [])}

    def list_names(self) -> List[str]:
        return list(self.scripts)

    def write(self, name: str, content: str) -> str:
        self.scripts[name] = content
        return name

    def delete(self, name: str) -> None:
        self.scripts.pop(name, None)


@dataclass(frozen=True)
class AllocatedMigration:
    """A migration script written under an allocated version."""

    version: int
    name: str
    location: str


def extract_version(file_name: str) -> Optional[int]:
    """Numeric prefix of a V<digits>... file name, or None."""
    match = VERSION_PATTERN.fullmatch(file_name)
    return int(match.group(1)) if match else None


class MigrationVersionAllocator:
    """Allocates monotonically increasing migration versions from a store."""

    def __init__(self, store: MigrationStore, baseline: int = BASELINE_VERSION):
        """
        Initialize the allocator.

        Args:
            store: Where existing migration scripts are listed and new ones written
            baseline: Version assumed to exist even when the store is empty
        """
        self.store = store
        self.baseline = baseline

    def current_version(self) -> int:
        """Highest version present in the store, or the baseline."""
        versions = [
            version
            for version in (extract_version(name) for name in self.store.list_names())
            if version is not None
        ]
        return max([self.baseline, *versions])

    def next_version(self) -> int:
        """Version the next migration script should use."""
        return self.current_version() + 1

    def write_migration(self, file_name_for, content: str) -> "AllocatedMigration":
        """
        Allocate a version and write a script in one step.

        Args:
            file_name_for: Callable mapping the allocated version to a file name
            content: Script content

        Returns:
            AllocatedMigration with the version, file name and store location
        """
        version = self.next_version()
        name = file_name_for(version)
        location = self.store.write(name, content)
        logger.debug("Allocated migration version %d -> %s", version, name)
        return AllocatedMigration(version=version, name=name, location=location)
