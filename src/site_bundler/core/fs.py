import os
import tempfile
from pathlib import Path


def relpath_posix(path: Path, base_dir: Path) -> str:
    """`path` relative to `base_dir` with forward slashes, or as-is when outside it."""
    try:
        return Path(path).relative_to(base_dir).as_posix()
    except ValueError:
        return Path(path).as_posix()


def _sync_dir(directory: Path) -> None:
    # Not every platform/filesystem allows fsync on a directory handle.
    try:
        fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)


def atomic_write_bytes(path: Path, data: bytes, *, mode: int = 0o644) -> None:
    """
    Replace `path` with `data` in one step.

    The bytes go to a hidden temp file next to the target, are fsync'd, and
    the temp file is renamed over the target. Readers of `path` (a browser,
    a dev server) never observe a half-written asset.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with tempfile.NamedTemporaryFile(
        mode="wb",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        except BaseException:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise

    try:
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    _sync_dir(path.parent)


def atomic_write_text(
    path: Path, text: str, *, encoding: str = "utf-8", mode: int = 0o644
) -> None:
    atomic_write_bytes(path, text.encode(encoding), mode=mode)


def probe_writable_dir(path: Path) -> None:
    """
    Create `path` if needed and prove a file can be written inside it.
    Raises OSError when the directory is not usable.
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    with tempfile.TemporaryFile(dir=path, prefix=".probe."):
        pass
