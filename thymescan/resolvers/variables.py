import re
from pathlib import Path
from typing import Any, List, Optional

from thymescan.config.base import DATA_EXTENSION, GLOBAL_DATA_FILE, LAYOUT_MARKERS
from thymescan.config.project import ProjectConfig
from thymescan.models import CompletionCandidate, IteratorInfo, VariableDefinition
from thymescan.parsers.expression import PROPERTY_PATH, find_top_level
from thymescan.parsers.variables import find_all_variable_matches, find_iterator_variables
from thymescan.utils.data import load_json, write_json
from thymescan.utils.file import read_text
from thymescan.utils.logs import Log

# Marks "first element of the array" in a resolved data path
ITEM = "[]"

OPEN_EXPRESSION = re.compile(r"(?:\[\[|\[\()?\$\{([^}]*)$")
TYPED_PATH = re.compile(r"[\w.]*$")


class VariableStore:
    """
    Variable data files of a preview workspace.

    Each template reads its variables from a JSON file under the data root
    mirroring the template's path (`pages/home.html` -> `pages/home.json`).
    Fragments and layouts share `global.json`.
    """

    def __init__(self, config: ProjectConfig):
        self.config = config

    def data_file_for(self, template: Path, text: Optional[str] = None) -> Path:
        if text is None:
            text = read_text(template) or ""
        if any(marker in text for marker in LAYOUT_MARKERS):
            return self.global_data_file()
        return self.template_data_file(template)

    def global_data_file(self) -> Path:
        return self._data_root() / GLOBAL_DATA_FILE

    def template_data_file(self, template: Path) -> Path:
        template = Path(template)
        try:
            relative = template.relative_to(self.config.template_root)
        except (TypeError, ValueError):
            relative = Path(template.name)
        return self._data_root() / relative.with_suffix(DATA_EXTENSION)

    def load(self, template: Path) -> dict:
        return load_json(self.data_file_for(template))

    def find_definition(self, template: Path, variable: str) -> Optional[VariableDefinition]:
        """Where `variable` is defined in the template's data file, or None."""
        data_file = self.data_file_for(template)
        data = load_json(data_file)

        parts = variable.split(".")
        found, value = _lookup(data, parts)
        if not found:
            return None

        line, character = _locate_key(data_file, parts)
        return VariableDefinition(file=data_file, line=line, character=character, value=value)

    def generate(self, template: Path) -> Optional[Path]:
        """
        Add every variable the template reads to its data file.

        New leaves are written as `""`; values already present are kept.
        Variables led by a `th:each` item become an array under the
        collection's path holding one item skeleton.
        """
        text = read_text(template)
        if text is None:
            return None

        data_file = self.data_file_for(template, text)
        data = load_json(data_file)
        info = find_iterator_variables(text)

        resolved = []
        for source, path in find_all_variable_matches(text):
            if source.startswith("#{") and path == _message_key(source):
                continue
            steps = _resolve_steps(path.split("."), info)
            if steps and steps not in resolved:
                resolved.append(steps)

        leaves = [steps for steps in resolved if not any(
            len(other) > len(steps) and other[:len(steps)] == steps for other in resolved
        )]
        for steps in leaves:
            _insert(data, steps)

        write_json(data_file, data)
        Log.generated(str(data_file), len(leaves))
        return data_file

    def complete(self, line_prefix: str, template: Path) -> List[CompletionCandidate]:
        """
        Variable names to offer after an open `${`, `[[${` or `[(${` on `line_prefix`.

        Global variables come first, then the template's own. Names are
        matched against the segment being typed, case-insensitively.
        """
        m = OPEN_EXPRESSION.search(line_prefix)
        if not m:
            return []

        typed = TYPED_PATH.search(m.group(1)).group(0).split(".")
        prefix = typed[-1].lower()
        parent = [part for part in typed[:-1] if part]

        text = read_text(template) or ""
        steps = _resolve_steps(parent, find_iterator_variables(text)) if parent else []
        if steps is None:
            return []

        sources = [("global", self.global_data_file())]
        template_file = self.template_data_file(template)
        if template_file != sources[0][1]:
            sources.append(("template", template_file))

        candidates = []
        for label, data_file in sources:
            node = _navigate(load_json(data_file), steps)
            if not isinstance(node, dict):
                continue
            detail_path = _display_path(data_file, self._data_root())
            for key, value in node.items():
                if prefix not in key.lower():
                    continue
                kind = _json_type(value)
                candidates.append(CompletionCandidate(
                    name=key, type=kind, source=label, detail=f"({kind}) {detail_path}"
                ))

        return candidates

    def _data_root(self) -> Path:
        return self.config.data_root or self.config.workspace_path


def _message_key(source: str) -> str:
    body = source[2:-1]
    paren = find_top_level(body, "(")
    return (body[:paren] if paren != -1 else body).strip()


def _resolve_steps(parts: List[str], info: IteratorInfo, seen: frozenset = frozenset()) -> Optional[List[str]]:
    """
    Rewrite an iterator-led path onto its collection, e.g. `item.name` -> `items.[].name`.

    A binding that iterates over itself (`n : ${n.children}`) resolves once;
    the inner collection path is kept literally.
    """
    head = parts[0]
    if head in info.parent_vars and head not in seen:
        m = PROPERTY_PATH.match(info.parent_vars[head])
        if not m:
            return None
        base = _resolve_steps(m.group(0).split("."), info, seen | {head})
        if base is None:
            return None
        return base + [ITEM] + parts[1:]
    if head in info.stat_vars:
        return None
    return parts


def _insert(data: dict, steps: List[str]):
    current: Any = data
    for index, step in enumerate(steps[:-1]):
        container = list if steps[index + 1] == ITEM else dict
        if step == ITEM:
            if not current:
                current.append(container())
            elif not isinstance(current[0], container):
                current[0] = container()
            current = current[0]
        else:
            if not isinstance(current.get(step), container):
                current[step] = container()
            current = current[step]

    last = steps[-1]
    if last == ITEM:
        if not current:
            current.append("")
    else:
        current.setdefault(last, "")


def _navigate(node: Any, steps: List[str]) -> Any:
    for step in steps:
        if isinstance(node, list):
            node = node[0] if node else None
        if step == ITEM:
            continue
        if not isinstance(node, dict):
            return None
        node = node.get(step)
    if isinstance(node, list):
        node = node[0] if node else None
    return node


def _lookup(data: Any, parts: List[str]):
    node = data
    for part in parts:
        if isinstance(node, list):
            node = next((item for item in node if isinstance(item, dict) and part in item), None)
        if not isinstance(node, dict) or part not in node:
            return False, None
        node = node[part]
    return True, node


def _locate_key(data_file: Path, parts: List[str]):
    """Line and column of the last key of `parts`, following the nesting in file order."""
    text = read_text(data_file) or ""
    lines = text.splitlines()
    line_number = 0
    character = 0
    for part in parts:
        pattern = re.compile(r'"' + re.escape(part) + r'"\s*:')
        for index in range(line_number, len(lines)):
            m = pattern.search(lines[index])
            if m:
                line_number, character = index, m.start()
                break
    return line_number, character


def _json_type(value: Any) -> str:
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if value is None:
        return "null"
    return "string"


def _display_path(data_file: Path, data_root: Path) -> str:
    try:
        return data_file.relative_to(data_root).as_posix()
    except ValueError:
        return data_file.as_posix()
