"""ZIP packaging of organised project folders.

Archives hold the *contents* of the source folder (not the folder itself),
compressed with DEFLATE at level 9.  Archive names follow
``<folder>_<UTC yyyyMMddHHmmss>.zip``.  Extraction and inspection helpers
exist so round-trips can be verified.
"""

from __future__ import annotations

import asyncio
import io
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from formgen.utils import ensure_dir

COMPRESSION = zipfile.ZIP_DEFLATED
COMPRESS_LEVEL = 9


def archive_name_for(folder: Path, when: datetime | None = None) -> str:
    when = when or datetime.now(timezone.utc)
    return f"{folder.name}_{when:%Y%m%d%H%M%S}.zip"


def _write_folder(archive: zipfile.ZipFile, source: Path, skip: Path | None = None) -> None:
    for path in sorted(source.rglob("*")):
        if skip is not None and path.resolve() == skip:
            continue
        arcname = path.relative_to(source).as_posix()
        if path.is_dir():
            # Keep empty directories as explicit entries.
            if not any(path.iterdir()):
                archive.writestr(arcname + "/", b"")
            continue
        archive.write(path, arcname)


class ArchivePackager:
    """Creates, extracts and inspects ZIP archives."""

    # -- Creation ----------------------------------------------------------

    async def create_archive(
        self,
        source_folder: str | Path,
        destination_folder: str | Path,
    ) -> Path:
        """Archive the contents of *source_folder* into *destination_folder*.

        A pre-existing archive with the same computed name is replaced.

        Raises:
            FileNotFoundError: If *source_folder* is not a directory.
        """
        source = Path(source_folder).resolve()
        if not source.is_dir():
            raise FileNotFoundError(f"Source folder not found: {source}")

        destination = ensure_dir(destination_folder)
        archive_path = destination / archive_name_for(source)
        if archive_path.exists():
            archive_path.unlink()

        await asyncio.to_thread(self._zip_folder, source, archive_path)
        return archive_path

    @staticmethod
    def _zip_folder(source: Path, archive_path: Path) -> None:
        with zipfile.ZipFile(
            archive_path, "w", compression=COMPRESSION, compresslevel=COMPRESS_LEVEL
        ) as archive:
            _write_folder(archive, source, skip=archive_path.resolve())

    async def create_archive_bytes(self, source_folder: str | Path) -> bytes:
        """Archive the contents of *source_folder* in memory and return the bytes."""
        source = Path(source_folder).resolve()
        if not source.is_dir():
            raise FileNotFoundError(f"Source folder not found: {source}")

        def build() -> bytes:
            buffer = io.BytesIO()
            with zipfile.ZipFile(
                buffer, "w", compression=COMPRESSION, compresslevel=COMPRESS_LEVEL
            ) as archive:
                _write_folder(archive, source)
            return buffer.getvalue()

        return await asyncio.to_thread(build)

    async def create_archive_from_files(
        self,
        files: Mapping[str, str | bytes],
        destination_folder: str | Path,
        archive_name: str,
    ) -> Path:
        """Build an archive directly from a name -> content mapping.

        ``.zip`` is appended to *archive_name* when missing.  Text content is
        stored as UTF-8.
        """
        if not archive_name.lower().endswith(".zip"):
            archive_name += ".zip"
        archive_path = ensure_dir(destination_folder) / archive_name
        if archive_path.exists():
            archive_path.unlink()

        def build() -> None:
            with zipfile.ZipFile(
                archive_path, "w", compression=COMPRESSION, compresslevel=COMPRESS_LEVEL
            ) as archive:
                for name, content in files.items():
                    data = content.encode("utf-8") if isinstance(content, str) else content
                    archive.writestr(name.replace("\\", "/"), data)

        await asyncio.to_thread(build)
        return archive_path

    # -- Extraction & inspection -------------------------------------------

    async def extract_archive(self, archive_path: str | Path, destination: str | Path) -> Path:
        """Extract *archive_path* into *destination*, overwriting existing files.

        Raises:
            FileNotFoundError: If the archive does not exist.
            ValueError: If an entry would land outside *destination*.
        """
        archive_file = Path(archive_path)
        if not archive_file.is_file():
            raise FileNotFoundError(f"Archive not found: {archive_file}")
        target = ensure_dir(destination)

        def extract() -> None:
            with zipfile.ZipFile(archive_file) as archive:
                for member in archive.infolist():
                    resolved = (target / member.filename).resolve()
                    if resolved != target and target not in resolved.parents:
                        raise ValueError(f"Unsafe archive entry: {member.filename}")
                archive.extractall(target)

        await asyncio.to_thread(extract)
        return target

    def list_entries(self, archive_path: str | Path) -> list[str]:
        archive_file = Path(archive_path)
        if not archive_file.is_file():
            raise FileNotFoundError(f"Archive not found: {archive_file}")
        with zipfile.ZipFile(archive_file) as archive:
            return archive.namelist()

    def archive_size(self, archive_path: str | Path) -> int:
        archive_file = Path(archive_path)
        if not archive_file.is_file():
            raise FileNotFoundError(f"Archive not found: {archive_file}")
        return archive_file.stat().st_size
