import hashlib
from dataclasses import dataclass
from pathlib import Path

CONTENT_HASH_LENGTH = 10


@dataclass(frozen=True)
class FileDigest:
    sha256: str
    bytes: int


def _as_bytes(data: bytes | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return data


def sha256_bytes(b: bytes | str) -> str:
    h = hashlib.sha256()
    h.update(_as_bytes(b))
    return h.hexdigest()


def content_hash(data: bytes | str) -> str:
    """
    Short content fingerprint used in `<stem>.<hash>.<ext>` filenames.
    """
    return sha256_bytes(data)[:CONTENT_HASH_LENGTH]


def sha256_file(path: Path, *, chunk_bytes: int = 1024 * 1024) -> FileDigest:
    h = hashlib.sha256()
    total = 0
    with path.open("rb") as f:
        while True:
            b = f.read(chunk_bytes)
            if not b:
                break
            h.update(b)
            total += len(b)

    return FileDigest(sha256=h.hexdigest(), bytes=total)
