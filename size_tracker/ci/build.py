"""
Artifact build and measurement.

Runs the configured build command and measures the single output file it
is expected to produce.
"""

import logging
import stat
from pathlib import Path
from typing import Sequence, Union

from ..errors import CommandError, ConfigurationError, SizeTrackerError
from ..logging import log_group
from ..process import run_command

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_PATH = "out"


def measure_artifact(artifact_path: Union[str, Path]) -> int:
    """Size in bytes of the build output.
    
    Raises:
        ConfigurationError: If the file is missing or not a regular file
    """
    path = Path(artifact_path)
    try:
        st = path.stat()
    except FileNotFoundError as e:
        raise ConfigurationError(f"expected output file '{path}' does not exist") from e
    except OSError as e:
        raise ConfigurationError(f"error reading output file '{path}': {e}") from e
    
    if not stat.S_ISREG(st.st_mode):
        raise ConfigurationError(f"output file '{path}' is not a regular file")
    return st.st_size


def build_artifact(
    build_args: Sequence[str],
    artifact_path: Union[str, Path] = DEFAULT_ARTIFACT_PATH,
    cwd: Union[str, Path] = ".",
) -> int:
    """Run the build command and return the artifact size.
    
    Args:
        build_args: Tokenized build command
        artifact_path: Output file, relative to ``cwd``
        cwd: Directory the build runs in
        
    Raises:
        ConfigurationError: If the command is empty or the artifact is
            missing or not a regular file
        SizeTrackerError: If the build command fails
    """
    if not build_args:
        raise ConfigurationError("build command is empty")
    
    with log_group("Building binary"):
        try:
            output = run_command(build_args, cwd=cwd)
        except CommandError as e:
            raise SizeTrackerError(f"running build command: {e}") from e
        if output.strip():
            logger.info(output.rstrip())
        
        size = measure_artifact(Path(cwd) / artifact_path)
        logger.info("Artifact %s is %d bytes", artifact_path, size)
    return size
