"""Discovery of layouts bundled with the package."""

from importlib.resources import files
from pathlib import Path


def get_builtin_layouts_dir() -> Path:
    """Return path to the bundled layout templates.

    Returns:
        Path to the directory containing built-in layouts.

    Raises:
        FileNotFoundError: If the layouts are not bundled.
    """
    layouts = files("quire").joinpath("layouts")
    if not layouts.is_dir():
        msg = "Bundled layouts not found. Reinstall quire with 'pip install -e .'."
        raise FileNotFoundError(msg)
    return Path(str(layouts))
