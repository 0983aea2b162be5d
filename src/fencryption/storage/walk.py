import os

from pathlib import Path
from typing import Callable, Iterator, List, Optional


def walk_dir(
    root: Path | str,
    on_error: Optional[Callable[[OSError], None]] = None,
) -> Iterator[os.DirEntry]:
    """Yield every entry below root, depth-first.

    A directory is yielded before its own entries. Symlinks are yielded
    but never followed. Each call walks from scratch.

    OSErrors (unreadable directory, failed stat) are passed to on_error and
    the walk goes on; without on_error they propagate.
    """
    try:
        levels: List[Iterator[os.DirEntry]] = [os.scandir(root)]
    except OSError as e:
        if on_error is None:
            raise
        on_error(e)
        return

    try:
        while levels:
            try:
                entry = next(levels[-1], None)
            except OSError as e:
                levels.pop().close()
                if on_error is None:
                    raise
                on_error(e)
                continue
            if entry is None:
                levels.pop().close()
                continue

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                if on_error is None:
                    raise
                on_error(e)
                continue

            yield entry

            if is_dir:
                try:
                    levels.append(os.scandir(entry.path))
                except OSError as e:
                    if on_error is None:
                        raise
                    on_error(e)
    finally:
        for it in levels:
            it.close()


def entry_kind(entry: os.DirEntry) -> str:
    if entry.is_symlink():
        return "unknown"
    if entry.is_file(follow_symlinks=False):
        return "file"
    if entry.is_dir(follow_symlinks=False):
        return "dir"
    return "unknown"
