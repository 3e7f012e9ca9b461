import contextlib
import os
import tempfile
from pathlib import Path


def read_text_or_none(path: Path) -> str | None:
    """Return the file's text, or None when it does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def read_bytes_or_none(path: Path) -> bytes | None:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


def atomic_write_text(path: Path | str, content: str, perms: int | None = None) -> None:
    """
    Atomically replace ``path`` with ``content``.

    The text is written as UTF-8 with no newline translation, so the file
    holds exactly ``content.encode("utf-8")``. It goes to a temp file in the
    destination directory, is fsynced, optionally chmod-ed, then renamed over
    the target. A failure at any step leaves the previous file untouched and
    no temp file behind.
    """
    final_path = Path(path)
    final_path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(
        dir=str(final_path.parent),
        prefix=f".{final_path.name}.",
        suffix=".tmp",
        text=True,
    )
    temp_path = Path(temp_name)

    try:
        try:
            temp_file = os.fdopen(fd, "w", encoding="utf-8", newline="")
        except Exception:
            os.close(fd)
            raise

        with temp_file:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        if perms is not None:
            os.chmod(temp_path, perms)  # noqa: PTH101
        elif final_path.exists():
            # keep the mode of the file being replaced (e.g. a user's 0600 .zshrc)
            os.chmod(temp_path, final_path.stat().st_mode & 0o7777)  # noqa: PTH101

        os.replace(temp_path, final_path)  # noqa: PTH105
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink()
        raise
