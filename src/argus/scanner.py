import os
from pathlib import Path
from typing import List, Optional

import pathspec

from argus.exceptions import ConfigError
from argus.logging_config import logger
from argus.tracing import trace

# Default patterns to ignore, mimicking common global gitignore settings
DEFAULT_IGNORE_PATTERNS = [
    ".git/",
    ".argus/",
    "__pycache__/",
    ".pytest_cache/",
    "*.egg-info/",
    ".venv/",
    "venv/",
    "node_modules/",
    "*.pyc",
    "*.pyo",
]


def _load_ignore_spec(directory: Path, respect_gitignore: bool) -> pathspec.PathSpec:
    all_patterns: List[str] = []
    if respect_gitignore:
        all_patterns.extend(DEFAULT_IGNORE_PATTERNS)
        gitignore_path = directory / ".gitignore"
        if gitignore_path.is_file():
            try:
                gitignore_patterns = gitignore_path.read_text(encoding="utf-8").splitlines()
                all_patterns.extend(gitignore_patterns)
                logger.debug(f"Loaded {len(gitignore_patterns)} patterns from '{gitignore_path}'")
            except (OSError, UnicodeError) as e:
                logger.warning(f"Could not read .gitignore file at '{gitignore_path}'. Error: {e}")
    return pathspec.PathSpec.from_lines("gitignore", all_patterns)


@trace
def list_files(
    directory: Path,
    extensions: Optional[List[str]] = None,
    respect_gitignore: bool = True,
) -> List[str]:
    """
    Walk `directory` and return candidate corpus files as sorted, relative POSIX paths.

    Args:
        directory: The root directory to start the scan from.
        extensions: File extensions to keep (e.g. ['.py', '.md']); None keeps all.
        respect_gitignore: If True, default ignores and the root .gitignore apply.

    Raises:
        ConfigError: `directory` is not a directory.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise ConfigError(f"Not a directory: {directory}")

    ignore_spec = _load_ignore_spec(directory, respect_gitignore)
    allowed_extensions = set(extensions) if extensions else None

    found: List[str] = []
    for root, dirs, files in os.walk(directory):
        root_path = Path(root)
        relative_root = root_path.relative_to(directory)

        # Prune ignored directories in-place so os.walk skips them
        dirs[:] = [d for d in dirs if not ignore_spec.match_file(f"{(relative_root / d).as_posix()}/")]

        for file_name in files:
            relative_path = (relative_root / file_name).as_posix()
            if ignore_spec.match_file(relative_path):
                continue
            if allowed_extensions and Path(file_name).suffix not in allowed_extensions:
                continue
            found.append(relative_path)

    found.sort()
    logger.info(f"Found {len(found)} files under '{directory}'")
    return found
