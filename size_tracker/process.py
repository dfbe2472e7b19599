"""
Blocking execution of external commands.

Every command is echoed to the log before it runs; stdout and stderr are
captured together so failures carry the full output.
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence, Union

from .errors import CommandError, ConfigurationError

logger = logging.getLogger(__name__)


def run_command(
    args: Sequence[str],
    cwd: Optional[Union[str, Path]] = None,
    input: Optional[str] = None,
    display: Optional[Sequence[str]] = None,
) -> str:
    """Run a command and return its combined output.

    Args:
        args: Executable followed by its arguments
        cwd: Working directory (defaults to the current one)
        input: Text passed on stdin
        display: Arguments to log in place of ``args`` (hides secrets)

    Returns:
        Combined stdout and stderr

    Raises:
        CommandError: If the command exits non-zero
        ConfigurationError: If the executable cannot be found
    """
    logger.info("[command] %s", " ".join(display or args))
    try:
        proc = subprocess.run(
            list(args),
            cwd=cwd,
            input=input,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except FileNotFoundError as e:
        raise ConfigurationError(f"executable not found: {args[0]}") from e

    if proc.returncode != 0:
        raise CommandError(display or args, proc.stdout, proc.returncode)
    return proc.stdout
