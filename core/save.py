"""core/save.py — PlayerState persistence.

A save file is the whole PlayerState tree as one JSON document.  The
tree is plain dataclasses, so encoding walks the fields and decoding is
driven by each dataclass's type hints; no per-class save code exists.

Load is version-gated: a file that cannot be read, is not JSON, carries
a different ``version`` or does not decode into the expected shape is
discarded and ``None`` is returned.  The caller starts fresh.  There is
no migration between versions.
"""

from __future__ import annotations
import json
import types
from dataclasses import fields, is_dataclass
from pathlib import Path
from typing import Any, Union, get_args, get_origin, get_type_hints

from components.player import PlayerState, SAVE_VERSION


SAVES_DIR = Path("saves")


class SaveFormatError(ValueError):
    """The payload does not match the PlayerState shape."""


def get_save_file(slot: int = 0, saves_dir: str | Path | None = None) -> Path:
    """Get the path for a save slot."""
    base = SAVES_DIR if saves_dir is None else Path(saves_dir)
    base.mkdir(parents=True, exist_ok=True)
    return base / f"slot{slot}.json"


# ═══════════════════════════════════════════════════════════════════
#  Encode
# ═══════════════════════════════════════════════════════════════════

def to_jsonable(obj: Any) -> Any:
    if is_dataclass(obj):
        return {f.name: to_jsonable(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_jsonable(v) for v in obj]
    return obj


def encode_state(state: PlayerState) -> str:
    return json.dumps(to_jsonable(state), separators=(",", ":"))


# ═══════════════════════════════════════════════════════════════════
#  Decode
# ═══════════════════════════════════════════════════════════════════

_hints_cache: dict[type, dict[str, Any]] = {}


def _hints(cls: type) -> dict[str, Any]:
    if cls not in _hints_cache:
        _hints_cache[cls] = get_type_hints(cls)
    return _hints_cache[cls]


def from_jsonable(tp: Any, value: Any, where: str = "state") -> Any:
    """Rebuild a value of type *tp* from its JSON form."""
    origin = get_origin(tp)

    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(tp) if a is not type(None)]
        if value is None:
            return None
        return from_jsonable(args[0], value, where)

    if origin is list:
        if not isinstance(value, list):
            raise SaveFormatError(f"{where}: expected list")
        (item_tp,) = get_args(tp) or (Any,)
        return [from_jsonable(item_tp, v, f"{where}[{i}]") for i, v in enumerate(value)]

    if origin is dict:
        if not isinstance(value, dict):
            raise SaveFormatError(f"{where}: expected object")
        _, val_tp = get_args(tp) or (str, Any)
        return {k: from_jsonable(val_tp, v, f"{where}.{k}") for k, v in value.items()}

    if is_dataclass(tp):
        if not isinstance(value, dict):
            raise SaveFormatError(f"{where}: expected object for {tp.__name__}")
        hints = _hints(tp)
        kwargs = {}
        for f in fields(tp):
            if f.name in value:
                kwargs[f.name] = from_jsonable(hints[f.name], value[f.name], f"{where}.{f.name}")
        return tp(**kwargs)

    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SaveFormatError(f"{where}: expected number")
        return float(value)
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise SaveFormatError(f"{where}: expected integer")
        return value
    if tp is bool:
        if not isinstance(value, bool):
            raise SaveFormatError(f"{where}: expected boolean")
        return value
    if tp is str:
        if not isinstance(value, str):
            raise SaveFormatError(f"{where}: expected string")
        return value
    if tp is Any or tp is dict or tp is list:
        return value
    raise SaveFormatError(f"{where}: unsupported type {tp!r}")


def decode_state(text: str) -> PlayerState:
    """Parse and version-check a save document.  Raises on any problem."""
    data = json.loads(text)
    if not isinstance(data, dict):
        raise SaveFormatError("save root is not an object")
    if data.get("version") != SAVE_VERSION:
        raise SaveFormatError(f"version {data.get('version')!r} != {SAVE_VERSION}")
    return from_jsonable(PlayerState, data)


# ═══════════════════════════════════════════════════════════════════
#  Files
# ═══════════════════════════════════════════════════════════════════

def save_state(state: PlayerState, path: str | Path) -> Path:
    """Write *state* to *path* (via a temp file, then replace)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w", encoding="utf-8") as f:
        f.write(encode_state(state))
    tmp.replace(path)
    return path


def load_state(path: str | Path) -> PlayerState | None:
    """Load a save, or None when there is none or it must be discarded."""
    path = Path(path)
    if not path.exists():
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return decode_state(f.read())
    except (OSError, ValueError, TypeError) as ex:
        print(f"[SAVE] Discarding save {path}: {ex}")
        return None
