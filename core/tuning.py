"""core/tuning.py — Data-driven engine tunables.

Engine knobs (offline cap, host sub-step, autosave cadence, combat
resolution caps, dungeon layout) live in ``data/tuning.toml`` and are
loaded once at startup.  Any system can read a value with::

    from core.tuning import get
    cap = get("offline", "max_seconds", 8 * 3600)

Every call site passes the shipped value as its default, so a missing
file or key never changes behaviour.
"""

from __future__ import annotations
from pathlib import Path

try:
    import tomllib                         # Python 3.11+
except ModuleNotFoundError:  # Python < 3.11
    import tomli as tomllib


_data: dict = {}
_path: Path | None = None


def default_path() -> Path:
    return Path(__file__).resolve().parent.parent / "data" / "tuning.toml"


def load(path: str | Path | None = None) -> None:
    """Load (or reload) tunables from *path*, default ``data/tuning.toml``."""
    global _data, _path

    path = default_path() if path is None else Path(path)
    _path = path

    if not path.exists():
        print(f"[TUNING] {path} not found, using defaults")
        _data = {}
        return

    with open(path, "rb") as f:
        _data = tomllib.load(f)

    print(f"[TUNING] Loaded {_count_leaves(_data)} values from {path}")


def reload() -> None:
    """Re-read the tuning file from disk."""
    load(_path)


def reset() -> None:
    """Forget all loaded values (tests use this to get pure defaults)."""
    global _data
    _data = {}


def get(section: str, key: str, default=None):
    """Read a tunable.

    *section* uses dot-notation to traverse nested tables, e.g.
    ``"combat.auto"`` looks up ``[combat.auto]``.
    """
    node = _data
    for part in section.split("."):
        if isinstance(node, dict):
            node = node.get(part)
        else:
            return default
        if node is None:
            return default
    if isinstance(node, dict):
        return node.get(key, default)
    return default


def _count_leaves(d: dict, _n: int = 0) -> int:
    for v in d.values():
        if isinstance(v, dict):
            _n = _count_leaves(v, _n)
        else:
            _n += 1
    return _n
