import logging
import subprocess
import sys
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


def is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


def module_command(module_name: str, args: Optional[Iterable[str]] = None) -> List[str]:
    """Command line that runs module_name with the current interpreter (or frozen build)."""
    cmd = [sys.executable]
    cmd += ["--run-module", module_name] if is_frozen() else ["-m", module_name]
    if args:
        cmd += list(args)
    return cmd


def spawn_module(module_name: str, args: Optional[Iterable[str]] = None, env: Optional[dict] = None) -> subprocess.Popen:
    cmd = module_command(module_name, args)
    logger.info("Launching %s", " ".join(cmd))
    return subprocess.Popen(cmd, env=env)
