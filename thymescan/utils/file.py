from pathlib import Path
from typing import List, Optional, Union

from thymescan.utils.logs import Log


def find_files_with_extension(
        folder: Union[str, Path],
        extension: str = '.html'
) -> List[Path]:
    """
    Recursively find all files in a folder (including subfolders)
    that match a single given extension.

    Args:
        folder (str | Path): The folder path to search in.
        extension (str): File extension to match (with or without dot), e.g. '.html' or 'html'.

    Returns:
        list[Path]: Matching files, sorted so listings are stable between runs.
    """
    folder = Path(folder)
    if not folder.is_dir():
        return []

    extension = extension if extension.startswith('.') else f'.{extension}'
    extension = extension.lower()

    return sorted(path for path in folder.rglob('*') if path.is_file() and path.suffix.lower() == extension)


def list_files(folder: Union[str, Path]) -> List[Path]:
    """All files below `folder`, relative to it."""
    folder = Path(folder)
    if not folder.is_dir():
        return []
    return sorted(path.relative_to(folder) for path in folder.rglob('*') if path.is_file())


def folder_exists(folder_path: Path) -> bool:
    """Return True if the folder exists and is a directory."""
    return folder_path.is_dir()


def file_exists(file_path: Path) -> bool:
    """Return True if the file exists and is a file."""
    return file_path.is_file()


def read_text(file_path: Path) -> Optional[str]:
    """Read a template as UTF-8, or None (with a warning) when it cannot be read."""
    try:
        return Path(file_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        Log.warning(f"Could not read {file_path}: {e}")
        return None


def relative_template_name(file_path: Path, template_root: Path, extension: str = '.html') -> str:
    """`<root>/fragments/header.html` -> `fragments/header`."""
    relative = Path(file_path).relative_to(template_root).as_posix()
    if relative.lower().endswith(extension.lower()):
        relative = relative[:-len(extension)]
    return relative
