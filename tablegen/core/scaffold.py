"""
Scaffold policy and the filesystem scaffolder.

The base module is derived and disposable: it is deleted and rewritten on every
run. Extension modules, test skeletons and package __init__ files receive
hand-written code, so they are created once and never touched again; they are
not even re-formatted.
"""
import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from tablegen.core.naming import module_name
from tablegen.core.synthesizer import render_extended, render_models_init, render_package_init, render_test
from tablegen.errors import ScaffoldError
from tablegen.models.generation import GeneratedArtifact

logger = logging.getLogger(__name__)


class FileScaffolder:
    """Directory creation, file writes and the external source formatter."""

    def __init__(self, formatter_argv: Optional[list[str]] = None):
        self.formatter_argv = formatter_argv or []

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def write(self, path: str, data: bytes, overwrite: bool) -> bool:
        """Write `data` to `path`. Without `overwrite` an existing file is left alone and False is returned."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            if overwrite:
                if target.exists():
                    target.unlink()
                target.write_bytes(data)
                return True
            with open(target, "xb") as fh:
                fh.write(data)
            return True
        except FileExistsError:
            return False
        except OSError as e:
            raise ScaffoldError(f"Could not write {path}: {e}") from e

    def format_source(self, path: str) -> None:
        if not self.formatter_argv:
            return
        cmd = [*self.formatter_argv, path]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise ScaffoldError(f"Formatter {self.formatter_argv[0]!r} could not be started: {e}") from e
        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout).strip()
            raise ScaffoldError(f"Formatter failed on {path} (exit {proc.returncode}): {detail}")


def plan_artifacts(
    table: str,
    base_source: str,
    output_dir: str,
    models_package: str = "models",
    name_funcs: bool = False,
) -> list[GeneratedArtifact]:
    """Every file generated for one table, tagged with its overwrite policy."""
    module = module_name(table)
    models_dir = Path(output_dir) / models_package.replace(".", os.sep)
    table_dir = models_dir / module
    return [
        GeneratedArtifact(
            name="base", path=str(table_dir / f"{module}_base.py"),
            content=base_source, regenerate_always=True,
        ),
        GeneratedArtifact(
            name="extended", path=str(table_dir / f"{module}_extended.py"),
            content=render_extended(table, models_package, name_funcs),
        ),
        GeneratedArtifact(
            name="test", path=str(table_dir / f"test_{module}.py"),
            content=render_test(table, models_package),
        ),
        GeneratedArtifact(
            name="package", path=str(table_dir / "__init__.py"),
            content=render_package_init(table, models_package),
        ),
        GeneratedArtifact(
            name="models_package", path=str(models_dir / "__init__.py"),
            content=render_models_init(),
        ),
    ]


def apply_policy(artifacts: list[GeneratedArtifact], fs: FileScaffolder) -> list[str]:
    """
    Write what the policy allows, then format each written file.
    Returns the written paths. A formatter failure raises ScaffoldError after
    the files are already on disk; they are left as written.
    """
    written: list[str] = []
    for art in artifacts:
        if not art.regenerate_always and fs.exists(art.path):
            logger.debug("Keeping existing %s", art.path)
            continue
        if fs.write(art.path, art.content.encode("utf-8"), overwrite=art.regenerate_always):
            written.append(art.path)

    for path in written:
        fs.format_source(path)
    return written
