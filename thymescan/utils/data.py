import json
from pathlib import Path
from typing import Any, Dict

from thymescan.utils.logs import Log


def load_json(path: Path) -> Dict[str, Any]:
    """Load a variable data file; missing, unreadable or invalid files load as `{}`."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        Log.warning(f"Could not load {path}: {e}")
        return {}
    return data if isinstance(data, dict) else {}


def write_json(path: Path, data: Dict[str, Any]):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
        f.write("\n")
