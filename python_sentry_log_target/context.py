"""Process context dump attached to every exported event."""
import os
import sys
from fnmatch import fnmatchcase
from pprint import pformat
from typing import Any, Callable, Dict, Iterable

MASK = "***"

DEFAULT_LOG_VARS = ("process", "sys.argv", "os.environ")

DEFAULT_MASK_VARS = (
    "os.environ.*PASSWORD*",
    "os.environ.*PASSWD*",
    "os.environ.*SECRET*",
    "os.environ.*TOKEN*",
    "os.environ.*KEY*",
    "os.environ.*CREDENTIAL*",
    "os.environ.SENTRY_DSN",
)


def _process_info() -> Dict[str, Any]:
    return {
        "pid": os.getpid(),
        "cwd": os.getcwd(),
        "executable": sys.executable,
        "python": sys.version.split()[0],
    }


SOURCES: Dict[str, Callable[[], Any]] = {
    "process": _process_info,
    "sys.argv": lambda: list(sys.argv),
    "os.environ": lambda: dict(os.environ),
}


def _mask(name: str, value: Any, mask_vars: Iterable[str]) -> Any:
    patterns = list(mask_vars)
    if not isinstance(value, dict):
        return value
    return {
        key: MASK if any(fnmatchcase(f"{name}.{key}", p) for p in patterns) else item
        for key, item in value.items()
    }


def get_context_message(
    log_vars: Iterable[str] = DEFAULT_LOG_VARS,
    mask_vars: Iterable[str] = DEFAULT_MASK_VARS,
) -> str:
    """
    Dumps process metadata as a readable block of text.

    Args:
        log_vars: Names of the sources to dump, in order. Unknown names are skipped.
        mask_vars: Glob patterns matched against dotted paths such as
            "os.environ.DB_PASSWORD"; matching values are replaced by "***".

    Returns:
        One "<name> = <value>" block per source, separated by blank lines.
    """
    blocks = []
    for name in log_vars:
        source = SOURCES.get(name)
        if source is None:
            continue
        value = _mask(name, source(), mask_vars)
        blocks.append(f"{name} = {pformat(value)}")
    return "\n\n".join(blocks)
