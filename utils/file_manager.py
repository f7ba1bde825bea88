import json
import logging
import os
import tempfile
import threading
from typing import Dict, Iterable, List, Optional

from utils.errors import DecodeFailed, ParseFailed, ValidationFailed, to_number

LOG = logging.getLogger(__name__)

_DATA_DIR = os.environ.get(
    "DAIRY_DATA_DIR",
    os.path.join(os.path.dirname(os.path.dirname(__file__)), "data"),
)
_FILE_LOCK = threading.Lock()

COLLECTIONS = ("animals", "milk", "customers", "expenses")

DEFAULTS = {
    "config.json": {
        "storage": {
            "key_prefix": "dms_"
        },
        "pricing": {
            "milk_rate_per_liter": 50
        },
        "chart": {
            "width": 600,
            "height": 300,
            "pixel_ratio": 1
        },
        "logging": {
            "level": "INFO"
        }
    }
}


def data_path(filename: str, data_dir: Optional[str] = None) -> str:
    data_dir = os.fspath(data_dir or _DATA_DIR)
    os.makedirs(data_dir, exist_ok=True)
    return os.path.join(data_dir, filename)


def _atomic_write(path: str, data_obj):
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=".tmp_", dir=os.path.dirname(path))
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            json.dump(data_obj, f, indent=2)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def ensure_defaults(data_dir: Optional[str] = None):
    for fname, default in DEFAULTS.items():
        path = data_path(fname, data_dir)
        if not os.path.exists(path):
            with _FILE_LOCK:
                _atomic_write(path, default)


def read_json(filename: str, data_dir: Optional[str] = None):
    path = data_path(filename, data_dir)
    with _FILE_LOCK:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)


def write_json(filename: str, obj, data_dir: Optional[str] = None):
    path = data_path(filename, data_dir)
    with _FILE_LOCK:
        _atomic_write(path, obj)


def load_config(data_dir: Optional[str] = None) -> Dict:
    """Config with every default section filled in."""
    ensure_defaults(data_dir)
    cfg = read_json("config.json", data_dir)
    merged = {}
    for section, values in DEFAULTS["config.json"].items():
        merged[section] = {**values, **(cfg.get(section) or {})}
    return merged


def _positive_setting(section: str, key: str, value) -> float:
    try:
        number = to_number(value)
    except ParseFailed:
        raise ValidationFailed(f"{section}.{key} must be a number")
    if number <= 0:
        raise ValidationFailed(f"{section}.{key} must be positive")
    return number


def _log_level(value) -> str:
    level = value.upper() if isinstance(value, str) else None
    if not level or not isinstance(logging.getLevelName(level), int):
        raise ValidationFailed(f"Unknown logging level: {value!r}")
    return level


def validate_config_update(data) -> Dict:
    """Checked copy of a partial config update; raises ValidationFailed.

    Unknown sections are ignored. ``storage`` is refused because the key
    prefix of a running store cannot change without orphaning its data.
    """
    if not isinstance(data, dict):
        raise ValidationFailed("Expected a JSON object")
    if "storage" in data:
        raise ValidationFailed("storage settings can only be changed in config.json before start")
    clean = {}
    for section, values in data.items():
        if section not in DEFAULTS["config.json"]:
            continue
        if not isinstance(values, dict):
            raise ValidationFailed(f"{section} must be an object")
        unknown = set(values) - set(DEFAULTS["config.json"][section])
        if unknown:
            raise ValidationFailed(f"Unknown {section} setting(s): {', '.join(sorted(unknown))}")
        if section == "logging":
            clean[section] = {k: _log_level(v) for k, v in values.items()}
        else:
            clean[section] = {k: _positive_setting(section, k, v) for k, v in values.items()}
    return clean


class RecordStore:
    """Key-value persistence for the four record collections.

    Each collection lives under a namespaced key (``key_prefix`` plus the
    collection name) and is stored as one JSON list in ``<data_dir>/<key>.json``.
    Writes are full replacements.

    ``on_decode_error`` decides what ``get`` does with a stored value that is
    not a JSON list: ``"empty"`` recovers to ``[]``, ``"raise"`` propagates
    ``DecodeFailed``.
    """

    def __init__(self, data_dir: Optional[str] = None, key_prefix: str = "dms_",
                 on_decode_error: str = "empty"):
        if on_decode_error not in ("empty", "raise"):
            raise ValueError(f"Unknown decode error policy: {on_decode_error}")
        self.data_dir = os.fspath(data_dir or _DATA_DIR)
        self.key_prefix = key_prefix
        self.on_decode_error = on_decode_error

    @classmethod
    def from_config(cls, data_dir: Optional[str] = None, **kwargs) -> "RecordStore":
        cfg = load_config(data_dir)
        return cls(data_dir, key_prefix=cfg["storage"]["key_prefix"], **kwargs)

    def key(self, collection: str) -> str:
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")
        return self.key_prefix + collection

    def path(self, collection: str) -> str:
        return data_path(self.key(collection) + ".json", self.data_dir)

    def load(self, collection: str) -> List[Dict]:
        """Strict read: missing key is empty, anything undecodable raises."""
        path = self.path(collection)
        if not os.path.exists(path):
            return []
        with _FILE_LOCK:
            with open(path, "rb") as f:
                raw = f.read()
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeFailed(f"{self.key(collection)}: {exc}") from exc
        if data is None:
            return []
        if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
            raise DecodeFailed(f"{self.key(collection)}: expected a list of records")
        return data

    def get(self, collection: str) -> List[Dict]:
        try:
            return self.load(collection)
        except DecodeFailed as exc:
            if self.on_decode_error == "raise":
                raise
            LOG.warning("Treating malformed collection as empty: %s", exc)
            return []

    def set(self, collection: str, records: Iterable[Dict]) -> bool:
        path = self.path(collection)
        rows = list(records)
        with _FILE_LOCK:
            _atomic_write(path, rows)
        LOG.debug("Wrote %d record(s) to %s", len(rows), self.key(collection))
        return True

    def clear(self):
        for collection in COLLECTIONS:
            self.set(collection, [])
