"""
Template, fragment and static resource reference analysis.
"""
import re
from typing import List, Optional

from thymescan.config.base import (
    INVALID_PATH_CHARS, RESOLVER_PREFIXES, STATIC_EXTENSIONS, TEMPLATE_REFERENCE_ATTRIBUTES
)
from thymescan.models import FragmentReference, TemplateReference, TextPosition
from thymescan.parsers.expression import (
    QUOTES,
    REFERENCE_EXPRESSION_START,
    expression_spans,
    find_closing,
    find_top_level,
)

REFERENCE_ATTRIBUTE_PATTERN = re.compile(
    r"(?<![\w-])(?:" + "|".join(re.escape(name) for name in TEMPLATE_REFERENCE_ATTRIBUTES) + r")"
    r"\s*=\s*([\"'])(.*?)\1",
    re.DOTALL,
)
FRAGMENT_DEFINITION_PATTERN = re.compile(r"(?:th|layout):fragment\s*=\s*[\"']([^\"']+)[\"']")
DYNAMIC_LINK_PATTERN = re.compile(r"@\{\s*\$\{")


def find_template_references(text: str) -> List[TemplateReference]:
    """
    Return the template, fragment and static resource paths referenced in `text`.

    Results are in source order, each path reported once (compared after
    `normalize_path`). `start_index` is the offset of the path itself, so
    `text[ref.start_index:ref.end_index] == ref.path`.
    """
    if not text:
        return []

    candidates = []
    covered = []

    for m in REFERENCE_ATTRIBUTE_PATTERN.finditer(text):
        covered.append((m.start(2), m.end(2)))
        candidates.extend(_references_in_value(text, m.start(2), m.end(2)))

    pos = 0
    while True:
        m = REFERENCE_EXPRESSION_START.search(text, pos)
        if not m:
            break
        start = m.start()
        if any(span_start <= start < span_end for span_start, span_end in covered):
            pos = m.end()
            continue
        close = find_closing(text, m.end() - 1)
        if close == -1:
            pos = m.end()
            continue
        if text[start] == "~":
            candidates.extend(_references_in_fragment(text, m.end(), close))
        else:
            candidates.extend(_references_in_link(text, m.end(), close))
        pos = close + 1

    references = []
    seen = set()
    for reference in sorted(candidates, key=lambda ref: ref.start_index):
        key = normalize_path(reference.path)
        if key in seen:
            continue
        seen.add(key)
        references.append(reference)

    return references


def parse_fragment_reference(path: str) -> FragmentReference:
    parts = [part.strip() for part in path.split("::")]
    fragment_id = parts[1] if len(parts) > 1 and parts[1] else None
    return FragmentReference(template_file=parts[0], fragment_id=fragment_id)


def is_fragment_definition(line: str) -> bool:
    return bool(FRAGMENT_DEFINITION_PATTERN.search(line))


def is_dynamic_link(line: str) -> bool:
    return bool(DYNAMIC_LINK_PATTERN.search(line))


def find_fragment_in_text(text: str, fragment_name: str) -> Optional[TextPosition]:
    """Position of the `th:fragment` / `layout:fragment` declaring `fragment_name`, parameters allowed."""
    pattern = re.compile(
        r"(?:th|layout):fragment\s*=\s*[\"']\s*" + re.escape(fragment_name) + r"\s*(?:\(|[\"'])"
    )
    for line_number, line in enumerate(text.splitlines()):
        m = pattern.search(line)
        if m:
            return TextPosition(line=line_number, character=m.start())
    return None


def normalize_path(path: str) -> str:
    return path.replace("\\", "/")


def normalize_resource_path(path: str) -> str:
    return path[1:] if path.startswith("/") else path


def get_path_without_prefix(path: str, prefix: str) -> str:
    if prefix and path.startswith(prefix):
        return path[len(prefix):]
    return path


def get_possible_static_paths(base_path: str) -> List[str]:
    return [f"{base_path}{extension}" for extension in STATIC_EXTENSIONS]


def _trim(text: str, start: int, end: int):
    while start < end and text[start].isspace():
        start += 1
    while end > start and text[end - 1].isspace():
        end -= 1
    return start, end


def _strip_literal_substitution(text: str, start: int, end: int):
    start, end = _trim(text, start, end)
    if end - start >= 2 and text[start] == "|" and text[end - 1] == "|":
        return _trim(text, start + 1, end - 1)
    return start, end


def _wraps(text: str, start: int, end: int, opener: str) -> bool:
    return text.startswith(opener, start) and find_closing(text, start + 1) == end - 1


def _references_in_value(text: str, start: int, end: int) -> List[TemplateReference]:
    start, end = _strip_literal_substitution(text, start, end)
    if start >= end:
        return []

    branches = _conditional_branches(text, start, end)
    if branches is not None:
        references = []
        for branch_start, branch_end in branches:
            branch_start, branch_end = _trim(text, branch_start, branch_end)
            if branch_end - branch_start < 2:
                continue
            if text[branch_start] in QUOTES and text[branch_end - 1] == text[branch_start]:
                references.extend(_reference_from_path(text, branch_start + 1, branch_end - 1))
            elif _wraps(text, branch_start, branch_end, "~{"):
                references.extend(_references_in_fragment(text, branch_start + 2, branch_end - 1))
        return references

    if _wraps(text, start, end, "~{"):
        return _references_in_fragment(text, start + 2, end - 1)

    return _reference_from_path(text, start, end)


def _conditional_branches(text: str, start: int, end: int):
    """Spans of the branches of a top-level `cond ? a : b` or `cond ?: a`, or None."""
    question = find_top_level(text, "?", start, end)
    if question == -1:
        return None
    if text.startswith("?:", question):
        return [(question + 2, end)]

    pos = question + 1
    while True:
        colon = find_top_level(text, ":", pos, end)
        if colon == -1:
            return [(question + 1, end)]
        if text.startswith("::", colon):
            pos = colon + 2
            continue
        return [(question + 1, colon), (colon + 1, end)]


def _references_in_fragment(text: str, start: int, end: int) -> List[TemplateReference]:
    separator = find_top_level(text, "::", start, end)
    return _reference_from_path(text, start, separator if separator != -1 else end)


def _references_in_link(text: str, start: int, end: int) -> List[TemplateReference]:
    start, end = _strip_literal_substitution(text, start, end)
    for stop in ("(", "?", "#"):
        index = find_top_level(text, stop, start, end)
        if index != -1:
            end = index
    return _reference_from_path(text, start, end)


def _reference_from_path(text: str, start: int, end: int) -> List[TemplateReference]:
    start, end = _trim(text, start, end)
    if start < end and text[start] in QUOTES:
        quote = text[start]
        start += 1
        if end > start and text[end - 1] == quote:
            end -= 1

    for wrapper in ("@{", "~{"):
        if text.startswith(wrapper, start):
            start += 2
            if end > start and text[end - 1] == "}":
                end -= 1
            break

    start, end = _strip_literal_substitution(text, start, end)

    for prefix in RESOLVER_PREFIXES:
        if text.startswith(prefix, start):
            start += len(prefix)
            break
    if text.startswith("~/", start):
        start += 2
    if text.startswith("/", start):
        start += 1

    path = text[start:end]
    if len(path) > 4 and path.startswith("__") and path.endswith("__"):
        return [TemplateReference(path=path, start_index=start)]

    for stop in ("::", "("):
        index = find_top_level(text, stop, start, end)
        if index != -1:
            end = index
    start, end = _trim(text, start, end)

    path = text[start:end]
    if not _is_valid_path(path):
        return []
    return [TemplateReference(path=path, start_index=start)]


def _is_valid_path(path: str) -> bool:
    if not path or path == "::":
        return False

    literal = []
    pos = 0
    for span_start, span_end in expression_spans(path):
        literal.append(path[pos:span_start])
        pos = span_end
    literal.append(path[pos:])
    literal = "".join(literal).strip()

    if not literal:
        return False
    return not any(char in INVALID_PATH_CHARS for char in literal)
