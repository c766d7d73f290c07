
import os
from pathlib import Path
from typing import Optional, Union


def resolve_base_dir(
    cli_arg: Optional[str] = None,
    config_val: Optional[str] = None,
    cwd: Optional[Union[str, Path]] = None
) -> Path:
    """
    Resolves the absolute working directory for relative patch paths.

    Priority:
    1. CLI argument (--dir)
    2. Config value (engine.working_dir)
    3. Current working directory (cwd)

    Returns:
        Path: Absolute, resolved path.
    """
    path_str = cli_arg or config_val

    if path_str:
        target = Path(path_str).expanduser().resolve()
    else:
        target = Path(cwd or os.getcwd()).resolve()

    return target


def resolve_target(base_dir: Path, path: Union[str, Path]) -> Path:
    """Absolute path of a patch target; relative paths hang off base_dir."""
    p = Path(path).expanduser()
    if not p.is_absolute():
        p = base_dir / p
    return p.resolve()


def is_safe_path(base_dir: Path, target_path: Path) -> bool:
    """
    Verifies that target_path is within base_dir or is base_dir itself.
    Prevents path traversal out of the working directory.
    """
    base = base_dir.resolve()
    target = target_path.resolve()
    return target == base or base in target.parents
