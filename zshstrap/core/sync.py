# zshstrap/core/sync.py
"""
Keeps the local .zshrc in step with the canonical copy served from a gist.

Sync state is binary: the sha256 digests of the local and remote text
either match or they don't. Only :func:`update_zshrc` writes anything; the
passive :func:`check_sync` just reports.
"""

from __future__ import annotations

import difflib
import hashlib
import tempfile
from pathlib import Path

import requests
from requests import Response, Session
from requests.exceptions import RequestException

from zshstrap.core.command import command_exists, run_command
from zshstrap.core.errors import FetchError
from zshstrap.core.io import atomic_write_text, read_bytes_or_none, read_text_or_none
from zshstrap.core.logger import LoggerProxy
from zshstrap.core.settings import Settings
from zshstrap.core.types import SyncState

log = LoggerProxy(__name__)

HASH_FILE_PERMS = 0o600


def digest_bytes(data: bytes) -> str:
    return "sha256:" + hashlib.sha256(data).hexdigest()


def digest_text(text: str) -> str:
    """Digest of ``text`` as UTF-8, the exact bytes ``update_zshrc`` writes."""
    return digest_bytes(text.encode("utf-8"))


def fetch_remote(settings: Settings, session: Session | None = None) -> str:
    """
    GET the remote .zshrc text.

    Raises:
        FetchError: on any transport error or non-2xx response.
    """
    if session is None:
        with requests.Session() as owned:
            return fetch_remote(settings, owned)

    url = settings.remote_url
    log.debug(f"Fetching remote zshrc from {url}")
    try:
        response: Response = session.get(url, timeout=settings.request_timeout)
    except RequestException as exc:
        raise FetchError(f"Could not fetch {url}: {exc}") from exc

    if not 200 <= response.status_code < 300:
        raise FetchError(f"Fetching {url} returned {response.status_code}: {response.reason}")
    return response.text


def read_recorded_hashes(settings: Settings) -> tuple[str | None, str | None]:
    """The (local, remote) digests written by the last update, if any."""
    local = read_text_or_none(settings.local_hash_path)
    remote = read_text_or_none(settings.remote_hash_path)
    return (local.strip() if local else None, remote.strip() if remote else None)


def compute_sync_state(settings: Settings, remote_text: str) -> SyncState:
    # raw bytes: no newline translation or decoding of the user's file
    local_bytes = read_bytes_or_none(settings.zshrc_path)
    return SyncState(
        local_hash=digest_bytes(local_bytes) if local_bytes is not None else None,
        remote_hash=digest_text(remote_text),
    )


def _warn_out_of_sync(state: SyncState) -> None:
    log.warning("Local .zshrc differs from the remote copy.")
    log.warning(f"  local:  {state.local_hash or '(missing)'}")
    log.warning(f"  remote: {state.remote_hash}")
    log.warning("  Review with `zshstrap zshrc-diff`, apply with `zshstrap update-zshrc`.")


def update_zshrc(
    settings: Settings,
    session: Session | None = None,
    remote_text: str | None = None,
) -> bool:
    """
    Overwrite the local .zshrc with the remote text and record its digest.

    Returns True when anything was written, False when already in sync.

    Raises:
        FetchError: when ``remote_text`` is not given and the fetch fails.
    """
    if remote_text is None:
        remote_text = fetch_remote(settings, session)

    state = compute_sync_state(settings, remote_text)
    recorded = read_recorded_hashes(settings)
    if state.in_sync and recorded == (state.remote_hash, state.remote_hash):
        log.info(f".zshrc is in sync ({state.remote_hash}).")
        return False

    atomic_write_text(settings.zshrc_path, remote_text)
    atomic_write_text(settings.local_hash_path, state.remote_hash + "\n", perms=HASH_FILE_PERMS)
    atomic_write_text(settings.remote_hash_path, state.remote_hash + "\n", perms=HASH_FILE_PERMS)
    log.info(f"Updated {settings.zshrc_path} to {state.remote_hash}.")
    return True


def check_sync(settings: Settings, session: Session | None = None) -> SyncState | None:
    """
    Passive startup check. Never raises on network trouble.

    Returns the state found by the check, or None when the remote could not
    be fetched. With the force-update flag set, an out-of-sync .zshrc is then
    updated in place; the returned state still describes what was found.
    """
    try:
        remote_text = fetch_remote(settings, session)
    except FetchError as exc:
        log.warning(f"Skipping .zshrc sync check: {exc}")
        return None

    state = compute_sync_state(settings, remote_text)
    if state.in_sync:
        log.debug(f".zshrc is in sync ({state.remote_hash}).")
        return state

    if settings.force_update:
        log.info("Force update requested; replacing local .zshrc.")
        update_zshrc(settings, remote_text=remote_text)
        return state

    _warn_out_of_sync(state)
    return state


def select_diff_command(local_path: Path, remote_path: Path) -> list[str] | None:
    """Prefer delta, then plain diff. None means no diff tool is installed."""
    if command_exists("delta"):
        return ["delta", str(local_path), str(remote_path)]
    if command_exists("diff"):
        return ["diff", "-u", str(local_path), str(remote_path)]
    return None


def unified_diff(local_text: str, remote_text: str, local_label: str) -> str:
    return "".join(
        difflib.unified_diff(
            local_text.splitlines(keepends=True),
            remote_text.splitlines(keepends=True),
            fromfile=local_label,
            tofile="remote",
        )
    )


def zshrc_diff(settings: Settings, session: Session | None = None) -> str | None:
    """
    Show the difference between the local and remote .zshrc.

    An external diff tool writes straight to the terminal and None is
    returned; without one, the unified diff text is returned for printing.

    Raises:
        FetchError: when the remote cannot be fetched.
    """
    remote_text = fetch_remote(settings, session)
    local_path = settings.zshrc_path
    local_bytes = read_bytes_or_none(local_path) or b""
    local_text = local_bytes.decode("utf-8", errors="replace")

    with tempfile.TemporaryDirectory(prefix="zshstrap-") as tmp:
        remote_path = Path(tmp) / "zshrc.remote"
        remote_path.write_bytes(remote_text.encode("utf-8"))
        if not local_path.exists():
            local_path = Path(tmp) / "zshrc.local"
            local_path.write_bytes(b"")

        cmd = select_diff_command(local_path, remote_path)
        if cmd is not None:
            # diff exits 1 when the files differ; that is not a failure here
            run_command(cmd, check=False, capture=False)
            return None

    return unified_diff(local_text, remote_text, str(settings.zshrc_path))
