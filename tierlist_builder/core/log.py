"""
File logger shared by every builder module.

Lines are appended as ``[<iso timestamp>] <msg>``. Only report() prints;
the server redirects stdout while it runs commands.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Union

LOG_FILE = Path(os.environ.get(
    'TIERLIST_BUILDER_LOG',
    str(Path(__file__).resolve().parent.parent / "tierlist_builder.log"),
))


def set_log_file(path: Union[str, Path]) -> Path:
    """Redirect log output. Returns the previous log path."""
    global LOG_FILE
    previous = LOG_FILE
    LOG_FILE = Path(path)
    return previous


def log(msg: str, flush_to_disk: bool = False) -> None:
    """Append a timestamped line to the log file.

    flush_to_disk: force an OS-level sync so the line survives a hard crash.
    """
    try:
        with open(LOG_FILE, 'a', encoding='utf-8') as f:
            f.write(f"[{datetime.now().isoformat()}] {msg}\n")
            if flush_to_disk:
                f.flush()
                os.fsync(f.fileno())
    except OSError:
        pass


def report(tag: str, msg: str) -> None:
    """Print a ``[tag] msg`` progress line and mirror it to the log file."""
    line = f"[{tag}] {msg}"
    print(line)
    log(line)
