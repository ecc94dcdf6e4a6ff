# src/bioc_loader/ingestion/files.py
from pathlib import Path
from typing import List, Union

from bioc_loader.core.exceptions import InputPathError


def _has_extension(path: Path, extension: str) -> bool:
    return path.suffix.lower() == extension.lower()


def get_files_to_process(path: Union[str, Path], extension: str = ".xml") -> List[Path]:
    """
    A single matching file, or every matching file directly inside a directory (sorted by name).
    Raises InputPathError when there is nothing to load.
    """
    path = Path(path)
    if path.is_file():
        if not _has_extension(path, extension):
            raise InputPathError(f"File is not an {extension} file: {path}")
        return [path]

    if path.is_dir():
        try:
            files = sorted(
                (entry for entry in path.iterdir() if entry.is_file() and _has_extension(entry, extension)),
                key=lambda entry: entry.name,
            )
        except OSError as exc:
            raise InputPathError(f"Error reading directory {path}: {exc}") from exc
        if not files:
            raise InputPathError(f"No {extension} files found in directory: {path}")
        return files

    raise InputPathError(f"Path does not exist or is not accessible: {path}")
