"""Named PxL script lookup."""

from pathlib import Path

from .errors import RequestError

SCRIPT_SUFFIX = ".pxl"


def read_script_file(filename: str) -> str:
    """Read a PxL script from an explicit path (CLI use)."""
    try:
        return Path(filename).read_text(encoding="utf-8")
    except OSError as e:
        raise RequestError(f"could not read PXL script file: {e}", e) from e


def load_named_script(scripts_dir: str, name: str) -> str:
    """
    Read a script from the scripts directory.

    Args:
        scripts_dir: Directory holding the .pxl files
        name: File name, with or without the .pxl suffix

    Raises:
        RequestError: If the name escapes the directory or the file is missing
    """
    if not name.endswith(SCRIPT_SUFFIX):
        name = f"{name}{SCRIPT_SUFFIX}"

    root = Path(scripts_dir).resolve()
    path = (root / name).resolve()
    if root not in path.parents:
        raise RequestError(f"Invalid script file: {name}")
    if not path.is_file():
        raise RequestError(f"Script file not found: {name}")

    return read_script_file(str(path))
