#!/usr/bin/env python3
import argparse
import hashlib
import json
import logging
import os
import shutil
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import requests

__version__ = "0.1.0"

APP_NAME = "automusic"
APP_QUALIFIER = "org"
APP_ORGANIZATION = "dr42"

NO_ACTIVE_BLOCK_ID = 255
WILDCARD_INPUT = "*"

EXIT_OK = 0
EXIT_DUPLICATE = 1
EXIT_CONFIG_STORE = 2
EXIT_CATALOG = 3
EXIT_CONFIG_CONSISTENCY = 4
EXIT_PLAYER_MISSING = 5
EXIT_CREDENTIAL_CACHE = 6
EXIT_SETTINGS = 7


def default_config_dir() -> str:
    if os.name == "nt":
        base = os.environ.get("APPDATA") or os.path.expanduser(os.path.join("~", "AppData", "Roaming"))
        return os.path.join(base, APP_ORGANIZATION, APP_NAME, "config")
    if sys.platform == "darwin":
        return os.path.join(
            os.path.expanduser("~/Library/Application Support"),
            f"{APP_QUALIFIER}.{APP_ORGANIZATION}.{APP_NAME}",
        )
    base = os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return os.path.join(base, APP_NAME)


def default_cache_dir() -> str:
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.path.expanduser(os.path.join("~", "AppData", "Local"))
        return os.path.join(base, APP_ORGANIZATION, APP_NAME, "cache")
    if sys.platform == "darwin":
        return os.path.join(
            os.path.expanduser("~/Library/Caches"),
            f"{APP_QUALIFIER}.{APP_ORGANIZATION}.{APP_NAME}",
        )
    base = os.environ.get("XDG_CACHE_HOME") or os.path.expanduser("~/.cache")
    return os.path.join(base, APP_NAME)


def default_settings_path() -> str:
    return os.path.join(default_config_dir(), "settings.json")


DEFAULT_SETTINGS = {
    "server": "",
    "poll_interval_sec": 5,
    "request_timeout_sec": 10,
    "player_path": "mpv",
    "terminate_timeout_sec": 5,
    "config_dir": "",
    "cache_dir": "",
    "log_file": "",
    "log_level": "INFO",
    "log_max_bytes": 5_000_000,
    "log_backup_count": 3,
}

NUMERIC_SETTINGS = (
    "poll_interval_sec",
    "request_timeout_sec",
    "terminate_timeout_sec",
    "log_max_bytes",
    "log_backup_count",
)


class AutomusicError(Exception):
    pass


class ConfigStoreError(AutomusicError):
    pass


class DuplicateEntryError(AutomusicError):
    def __init__(self, existing: "ConfigEntry") -> None:
        super().__init__(f"Config already exists: {existing}")
        self.existing = existing


class TransientError(AutomusicError):
    pass


class CatalogError(AutomusicError):
    pass


class ConfigConsistencyError(AutomusicError):
    def __init__(self, unknown_type_names: Sequence[str]) -> None:
        names = ", ".join(repr(name) for name in unknown_type_names)
        super().__init__(f"Config references block types missing from the server catalog: {names}")
        self.unknown_type_names = list(unknown_type_names)


class PlaybackError(AutomusicError):
    pass


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int


@dataclass(frozen=True)
class BlockType:
    id: int
    name: str
    color: Color


@dataclass(frozen=True)
class ConfigEntry:
    type_name: str
    block_name: Optional[str]
    music_url: str
    is_playlist: bool

    @property
    def is_wildcard(self) -> bool:
        return self.block_name is None

    def to_json(self) -> Dict:
        return {
            "type_name": self.type_name,
            "block_name": self.block_name,
            "music_url": self.music_url,
            "is_playlist": self.is_playlist,
        }

    def __str__(self) -> str:
        return json.dumps(self.to_json(), ensure_ascii=False)


@dataclass(frozen=True)
class ResolvedTarget:
    media_reference: str
    is_playlist: bool


@dataclass(frozen=True)
class ActiveState:
    block_id: int
    block_name: str

    @classmethod
    def none(cls) -> "ActiveState":
        return cls(NO_ACTIVE_BLOCK_ID, "")

    @property
    def is_idle(self) -> bool:
        return self == ActiveState.none()


LookupTable = Dict[int, Tuple[ConfigEntry, ...]]


def is_uint8(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


def config_entry_from_json(raw: object) -> ConfigEntry:
    if not isinstance(raw, dict):
        raise ValueError(f"entry must be an object, got {type(raw).__name__}")
    type_name = raw.get("type_name")
    block_name = raw.get("block_name")
    music_url = raw.get("music_url")
    is_playlist = raw.get("is_playlist")
    if not isinstance(type_name, str):
        raise ValueError("type_name must be a string")
    if block_name is not None and not isinstance(block_name, str):
        raise ValueError("block_name must be a string or null")
    if not isinstance(music_url, str):
        raise ValueError("music_url must be a string")
    if not isinstance(is_playlist, bool):
        raise ValueError("is_playlist must be a boolean")
    return ConfigEntry(type_name, block_name, music_url, is_playlist)


def block_type_from_json(raw: object) -> BlockType:
    if not isinstance(raw, dict):
        raise ValueError(f"block type must be an object, got {type(raw).__name__}")
    block_id = raw.get("id")
    name = raw.get("name")
    color = raw.get("color")
    if not is_uint8(block_id):
        raise ValueError(f"block type id out of range: {block_id!r}")
    if not isinstance(name, str):
        raise ValueError("block type name must be a string")
    if not isinstance(color, dict) or not all(is_uint8(color.get(key)) for key in ("r", "g", "b")):
        raise ValueError(f"block type {name!r} has an invalid color")
    return BlockType(block_id, name, Color(color["r"], color["g"], color["b"]))


def resolve_path_from_base(base_dir: str, value: str) -> str:
    if not value:
        return value
    value = os.path.expanduser(value)
    if os.path.isabs(value):
        return os.path.normpath(value)
    return os.path.normpath(os.path.join(base_dir, value))


def load_settings(path: str, required: bool = False) -> Dict:
    abs_path = os.path.abspath(path)
    settings = dict(DEFAULT_SETTINGS)
    if not os.path.exists(abs_path):
        if required:
            raise FileNotFoundError(f"Settings not found: {path}")
        return settings
    with open(abs_path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must contain a JSON object: {path}")
    settings.update(data)
    for key in NUMERIC_SETTINGS:
        value = settings.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
            raise ValueError(f"Setting {key!r} must be a non-negative number, got {value!r}")
    base_dir = os.path.dirname(abs_path)
    for key in ("config_dir", "cache_dir", "log_file"):
        value = settings.get(key)
        if isinstance(value, str) and value:
            settings[key] = resolve_path_from_base(base_dir, value)
    return settings


def setup_logging(settings: Dict) -> None:
    level = getattr(logging, str(settings.get("log_level") or "INFO").upper(), logging.INFO)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    log_file = settings.get("log_file")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_file,
                maxBytes=int(settings.get("log_max_bytes") or 0),
                backupCount=int(settings.get("log_backup_count") or 0),
            )
        )
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(message)s",
        handlers=handlers,
    )


def write_json_file(path: str, data: object) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)


def find_entry(
    entries: Iterable[ConfigEntry],
    type_name: str,
    block_name: Optional[str],
) -> Optional[ConfigEntry]:
    for entry in entries:
        if entry.type_name == type_name and entry.block_name == block_name:
            return entry
    return None


class ConfigStore:
    """Block-to-media entries persisted as a JSON array.

    The file is rewritten wholesale on every add. There is no locking: a
    second writer racing an add can lose entries.
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.abspath(path)

    def _ensure_exists(self) -> None:
        if not os.path.exists(self.path):
            write_json_file(self.path, [])

    def load_all(self) -> List[ConfigEntry]:
        self._ensure_exists()
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except ValueError as exc:
            raise ConfigStoreError(f"Config file {self.path} is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise ConfigStoreError(f"Config file {self.path} must contain a JSON array")
        entries: List[ConfigEntry] = []
        for index, raw in enumerate(data):
            try:
                entries.append(config_entry_from_json(raw))
            except ValueError as exc:
                raise ConfigStoreError(f"Config file {self.path}, entry {index}: {exc}") from exc
        return entries

    def last_modified(self) -> int:
        self._ensure_exists()
        return os.stat(self.path).st_mtime_ns

    def add(self, entry: ConfigEntry) -> None:
        entries = self.load_all()
        existing = find_entry(entries, entry.type_name, entry.block_name)
        if existing is not None:
            raise DuplicateEntryError(existing)
        entries.append(entry)
        write_json_file(self.path, [e.to_json() for e in entries])
        logging.info("Added config entry %s", entry)


def server_base_url(server: str) -> str:
    server = server.strip().rstrip("/")
    if "://" in server:
        return server
    return f"http://{server}"


class RemoteStateClient:
    def __init__(
        self,
        server: str,
        token: str,
        timeout_sec: float = 10,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = server_base_url(server)
        self._headers = {"Authorization": f"Bearer {token}"}
        self._timeout = timeout_sec
        self._session = session if session is not None else requests.Session()

    def _get_json(self, path: str) -> object:
        resp = self._session.get(
            f"{self.base_url}/{path}",
            headers=self._headers,
            timeout=self._timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def fetch_catalog(self) -> List[BlockType]:
        try:
            data = self._get_json("blocktypes")
        except (requests.RequestException, ValueError) as exc:
            raise CatalogError(f"Failed to fetch block types from {self.base_url}: {exc}") from exc
        if not isinstance(data, list):
            raise CatalogError("Block type catalog must be a JSON array")
        try:
            return [block_type_from_json(raw) for raw in data]
        except ValueError as exc:
            raise CatalogError(f"Malformed block type catalog: {exc}") from exc

    def fetch_current_block_id(self) -> int:
        try:
            value = self._get_json("currentblocktype")
        except (requests.RequestException, ValueError) as exc:
            raise TransientError(f"current block type: {exc}") from exc
        if not is_uint8(value):
            raise TransientError(f"current block type: unexpected value {value!r}")
        return value

    def fetch_current_block_name(self) -> str:
        try:
            value = self._get_json("currentblockname")
        except (requests.RequestException, ValueError) as exc:
            raise TransientError(f"current block name: {exc}") from exc
        if not isinstance(value, str):
            raise TransientError(f"current block name: unexpected value {value!r}")
        return value

    def fetch_active_state(self) -> ActiveState:
        block_id = self.fetch_current_block_id()
        block_name = self.fetch_current_block_name()
        return ActiveState(block_id, block_name)


def build_lookup_table(catalog: Iterable[BlockType], entries: Iterable[ConfigEntry]) -> LookupTable:
    ids_by_name = {block_type.name: block_type.id for block_type in catalog}
    grouped: Dict[int, List[ConfigEntry]] = {}
    unknown: List[str] = []
    for entry in entries:
        block_id = ids_by_name.get(entry.type_name)
        if block_id is None:
            if entry.type_name not in unknown:
                unknown.append(entry.type_name)
            continue
        grouped.setdefault(block_id, []).append(entry)
    if unknown:
        raise ConfigConsistencyError(unknown)
    return {block_id: tuple(group) for block_id, group in grouped.items()}


def select_entry(entries: Iterable[ConfigEntry], block_name: str) -> Optional[ConfigEntry]:
    entries = list(entries)
    for entry in entries:
        if entry.block_name is not None and entry.block_name == block_name:
            return entry
    for entry in entries:
        if entry.is_wildcard:
            return entry
    return None


def resolve(lookup: LookupTable, block_id: int, block_name: str) -> Optional[ResolvedTarget]:
    entry = select_entry(lookup.get(block_id, ()), block_name)
    if entry is None:
        return None
    return ResolvedTarget(entry.music_url, entry.is_playlist)


def build_player_args(player_path: str, target: ResolvedTarget) -> List[str]:
    args = [player_path, target.media_reference, "--no-video"]
    if target.is_playlist:
        args += ["--shuffle", "--loop-playlist"]
    else:
        args.append("--loop")
    return args


class PlaybackSupervisor:
    """Owns the single player process. `apply` is the only way to change it."""

    def __init__(
        self,
        player_path: str = "mpv",
        terminate_timeout_sec: float = 5,
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
    ) -> None:
        self._player_path = player_path
        self._terminate_timeout = terminate_timeout_sec
        self._popen = popen
        self._proc: Optional[subprocess.Popen] = None
        self._target: Optional[ResolvedTarget] = None

    @property
    def current_target(self) -> Optional[ResolvedTarget]:
        return self._target

    @property
    def pid(self) -> Optional[int]:
        return self._proc.pid if self._proc is not None else None

    def is_running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    def _signal(self, proc: subprocess.Popen, hard: bool) -> None:
        # Player runs in its own session; the group includes any helpers it spawned.
        if os.name != "nt" and proc.pid:
            try:
                os.killpg(proc.pid, signal.SIGKILL if hard else signal.SIGTERM)
            except ProcessLookupError:
                pass
        elif hard:
            proc.kill()
        else:
            proc.terminate()

    def _terminate(self) -> None:
        # The handle is only dropped once the process has exited.
        self._target = None
        proc = self._proc
        if proc is None:
            return
        if proc.poll() is not None:
            self._proc = None
            return
        try:
            self._signal(proc, hard=False)
            try:
                proc.wait(timeout=self._terminate_timeout)
            except subprocess.TimeoutExpired:
                logging.warning("Player pid %s ignored SIGTERM; killing", proc.pid)
                self._signal(proc, hard=True)
                proc.wait(timeout=self._terminate_timeout)
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise PlaybackError(f"Failed to stop player pid {proc.pid}: {exc}") from exc
        self._proc = None
        logging.info("Stopped player pid %s", proc.pid)

    def _launch(self, target: ResolvedTarget) -> None:
        args = build_player_args(self._player_path, target)
        popen_kwargs = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
        }
        if os.name == "nt":
            popen_kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        else:
            popen_kwargs["start_new_session"] = True
        try:
            self._proc = self._popen(args, **popen_kwargs)
        except OSError as exc:
            raise PlaybackError(f"Failed to start {self._player_path}: {exc}") from exc
        self._target = target
        logging.info("Playing %s (pid %s, playlist=%s)", target.media_reference, self._proc.pid, target.is_playlist)

    def apply(self, target: Optional[ResolvedTarget]) -> bool:
        """Make the running process match `target`. Returns False on a no-op."""
        if target == self._target:
            if target is None and self._proc is None:
                return False
            if target is not None and self.is_running():
                return False
        self._terminate()
        if target is not None:
            self._launch(target)
        return True

    def stop(self) -> None:
        self._terminate()


class Reconciler:
    def __init__(
        self,
        store: ConfigStore,
        client: RemoteStateClient,
        supervisor: PlaybackSupervisor,
        catalog: Sequence[BlockType],
        poll_interval_sec: float = 5,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self._store = store
        self._client = client
        self._supervisor = supervisor
        self._catalog = list(catalog)
        self._poll_interval = poll_interval_sec
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self._state = ActiveState.none()
        self._consecutive_failures = 0
        self._last_modified = store.last_modified()
        self._lookup = build_lookup_table(self._catalog, store.load_all())

    @property
    def state(self) -> ActiveState:
        return self._state

    @property
    def lookup(self) -> LookupTable:
        return self._lookup

    def reload_if_changed(self) -> bool:
        try:
            modified = self._store.last_modified()
        except OSError as exc:
            logging.error("Cannot stat config file %s: %s", self._store.path, exc)
            return False
        if modified == self._last_modified:
            return False
        self._last_modified = modified
        try:
            lookup = build_lookup_table(self._catalog, self._store.load_all())
        except (ConfigStoreError, ConfigConsistencyError, OSError) as exc:
            logging.error("Config reload failed, keeping previous entries: %s", exc)
            return False
        self._lookup = lookup
        logging.info("Config reloaded: %d block types mapped", len(lookup))
        return True

    def _poll(self) -> Optional[ActiveState]:
        try:
            polled = self._client.fetch_active_state()
        except TransientError as exc:
            self._consecutive_failures += 1
            if self._consecutive_failures == 1:
                logging.warning("Poll failed, skipping cycle: %s", exc)
            else:
                logging.debug("Poll failed (%d in a row): %s", self._consecutive_failures, exc)
            return None
        if self._consecutive_failures:
            logging.info("Server reachable again after %d failed polls", self._consecutive_failures)
            self._consecutive_failures = 0
        return polled

    def run_cycle(self) -> bool:
        """One reconciliation cycle. Returns True when a transition was attempted."""
        self.reload_if_changed()
        polled = self._poll()
        if polled is None:
            return False
        if polled == self._state:
            if self._supervisor.current_target is None or self._supervisor.is_running():
                return False
            logging.warning("Player exited on its own; restarting")
        else:
            logging.info("Active block changed: id=%s name=%r", polled.block_id, polled.block_name)
            self._state = polled
        target = resolve(self._lookup, polled.block_id, polled.block_name)
        if polled.is_idle:
            logging.info("No block active")
        elif target is None:
            logging.info("No config entry for block id=%s name=%r", polled.block_id, polled.block_name)
        try:
            self._supervisor.apply(target)
        except PlaybackError as exc:
            logging.error("Playback transition failed: %s", exc)
            self._state = ActiveState.none()
        return True

    def run(self) -> None:
        while not self.stop_event.is_set():
            self.run_cycle()
            self.stop_event.wait(self._poll_interval)


def hash_password(password: str) -> str:
    return hashlib.sha256(password.strip().encode("utf-8")).hexdigest()


def read_cached_value(
    path: str,
    prompt: str,
    input_fn: Callable[[str], str] = input,
    transform: Optional[Callable[[str], str]] = None,
) -> str:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            cached = fh.read().strip()
        if cached:
            return cached
    except FileNotFoundError:
        pass
    value = input_fn(prompt).strip()
    if transform is not None:
        value = transform(value)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(value)
    return value


def load_token(cache_dir: str, input_fn: Callable[[str], str] = input) -> str:
    return read_cached_value(
        os.path.join(cache_dir, "password.txt"),
        "Enter password: ",
        input_fn=input_fn,
        transform=hash_password,
    )


def load_server(cache_dir: str, input_fn: Callable[[str], str] = input) -> str:
    return read_cached_value(
        os.path.join(cache_dir, "server_ip.txt"),
        "Enter server IP: ",
        input_fn=input_fn,
    )


def config_store_for(settings: Dict) -> ConfigStore:
    config_dir = settings.get("config_dir") or default_config_dir()
    return ConfigStore(os.path.join(config_dir, "config.json"))


def run_add(store: ConfigStore, input_fn: Callable[[str], str] = input) -> int:
    type_name = input_fn("Enter the block type name: ").strip()
    raw_block_name = input_fn(f"Enter the block name: ({WILDCARD_INPUT} for all) ").strip()
    block_name = None if raw_block_name == WILDCARD_INPUT else raw_block_name

    existing = find_entry(store.load_all(), type_name, block_name)
    if existing is not None:
        print("Config already exists")
        print(f"Config: {existing}")
        return EXIT_DUPLICATE

    music_url = input_fn("Enter the music URL: ").strip()
    is_playlist = input_fn("Is it a playlist? (y/n) ").strip().lower() == "y"
    try:
        store.add(ConfigEntry(type_name, block_name, music_url, is_playlist))
    except DuplicateEntryError as exc:
        print("Config already exists")
        print(f"Config: {exc.existing}")
        return EXIT_DUPLICATE
    return EXIT_OK


def run_player(settings: Dict, store: ConfigStore, input_fn: Callable[[str], str] = input) -> int:
    player_path = str(settings.get("player_path") or "mpv")
    if shutil.which(player_path) is None:
        logging.error("Playback program %r not found on PATH", player_path)
        return EXIT_PLAYER_MISSING

    cache_dir = settings.get("cache_dir") or default_cache_dir()
    try:
        token = load_token(cache_dir, input_fn)
        server = str(settings.get("server") or "") or load_server(cache_dir, input_fn)
    except OSError as exc:
        logging.error("Cannot cache credentials in %s: %s", cache_dir, exc)
        return EXIT_CREDENTIAL_CACHE

    client = RemoteStateClient(server, token, timeout_sec=float(settings["request_timeout_sec"]))
    try:
        catalog = client.fetch_catalog()
    except CatalogError as exc:
        logging.error("Cannot start without the block type catalog: %s", exc)
        return EXIT_CATALOG
    logging.info("Fetched %d block types from %s", len(catalog), client.base_url)

    supervisor = PlaybackSupervisor(
        player_path,
        terminate_timeout_sec=float(settings["terminate_timeout_sec"]),
    )
    try:
        reconciler = Reconciler(
            store,
            client,
            supervisor,
            catalog,
            poll_interval_sec=float(settings["poll_interval_sec"]),
        )
    except ConfigConsistencyError as exc:
        logging.error("%s", exc)
        return EXIT_CONFIG_CONSISTENCY
    except (ConfigStoreError, OSError) as exc:
        logging.error("Cannot read config store: %s", exc)
        return EXIT_CONFIG_STORE

    def _handle(sig, _frame):
        logging.info("Signal %s received, stopping...", sig)
        reconciler.stop_event.set()

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)

    try:
        reconciler.run()
    finally:
        try:
            supervisor.stop()
        except PlaybackError as exc:
            logging.error("%s", exc)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Automatically play music based on the current block type",
    )
    parser.add_argument("--version", action="version", version=f"{APP_NAME} - {__version__}")
    parser.add_argument("--settings", help="Path to settings.json")
    parser.add_argument(
        "command",
        nargs="?",
        choices=["add"],
        help="add: create a new block config entry interactively",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.settings:
            settings = load_settings(args.settings, required=True)
        else:
            settings = load_settings(default_settings_path())
    except (OSError, ValueError) as exc:
        print(f"{APP_NAME}: invalid settings: {exc}", file=sys.stderr)
        return EXIT_SETTINGS
    setup_logging(settings)

    store = config_store_for(settings)
    try:
        if args.command == "add":
            return run_add(store)
        return run_player(settings, store)
    except ConfigStoreError as exc:
        logging.error("%s", exc)
        return EXIT_CONFIG_STORE
    except OSError as exc:
        logging.error("Config store is not writable: %s", exc)
        return EXIT_CONFIG_STORE


if __name__ == "__main__":
    raise SystemExit(main())
