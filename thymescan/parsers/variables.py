"""
Variable expression analysis.

Finds every `${...}`, `*{...}`, `#{...}`, `@{...}` and `~{...}` expression in a
piece of template text and reports the variable paths it reads, paired with
the outermost expression text they were found in.
"""
import re
from typing import List

from thymescan.config.base import (
    AGGREGATE_METHODS,
    ASSIGNMENT_ATTRIBUTES,
    FIELD_METHODS,
    FIELD_WILDCARDS,
    SCANNED_ATTRIBUTES,
    VARIABLE_SCOPE_OBJECTS,
)
from thymescan.models import ExpressionMatch, IteratorInfo, VariableReference
from thymescan.parsers.expression import (
    EXPRESSION_START,
    IDENTIFIER,
    PROPERTY_PATH,
    build_path_chain,
    expression_spans,
    find_assignment,
    find_closing,
    find_top_level,
    is_numeric_literal,
    is_reserved_word,
    is_security_function,
    is_string_literal,
    match_brackets,
    split_parameters,
    strip_escaped_expressions,
    tokenize,
    unquote,
)

ATTRIBUTE_PATTERN = re.compile(
    r"(?<![\w-])(?:th:|data-th-)(" + "|".join(SCANNED_ATTRIBUTES) + r")\s*=\s*([\"'])(.*?)\2",
    re.DOTALL,
)
EACH_PATTERN = re.compile(r"(?<![\w-])(?:th:|data-th-)each\s*=\s*([\"'])(.*?)\1", re.DOTALL)


class _MatchCollector:
    """Ordered, de-duplicated `(source, path)` pairs for one analyzer call."""

    def __init__(self):
        self.matches: List[ExpressionMatch] = []
        self._seen = set()

    def add(self, source: str, path: str):
        if not path:
            return
        match = ExpressionMatch(source, path)
        if match in self._seen:
            return
        self._seen.add(match)
        self.matches.append(match)

    def add_chain(self, source: str, segments: List[str]):
        for path in build_path_chain(segments):
            self.add(source, path)


def find_all_variable_matches(text: str) -> List[ExpressionMatch]:
    """
    Return `(source, path)` pairs for every variable path read by `text`.

    A dotted chain such as `user.address.street` yields one pair per prefix,
    shortest first. Backslash-escaped expressions are ignored along with
    everything inside them. Malformed or unfinished expressions contribute
    nothing; the rest of the text is still analyzed.
    """
    if not text:
        return []

    text = strip_escaped_expressions(text)
    collector = _MatchCollector()

    # Comments and inline markers need no pass of their own, the generic
    # scan reaches every expression regardless of its surroundings.
    _scan_text(text, collector)

    for m in ATTRIBUTE_PATTERN.finditer(text):
        name, body = m.group(1), m.group(3)
        if name in ASSIGNMENT_ATTRIBUTES:
            for assignment in split_parameters(body):
                index = find_assignment(assignment)
                _scan_text(assignment[index + 1:] if index != -1 else assignment, collector)
        else:
            _scan_text(body, collector)

    return collector.matches


def find_iterator_variables(text: str) -> IteratorInfo:
    """Collect the loop and status variables bound by every `th:each` in `text`."""
    info = IteratorInfo()
    if not text:
        return info

    for m in EACH_PATTERN.finditer(text):
        body = m.group(2)
        colon = find_top_level(body, ":")
        if colon == -1:
            continue

        collection = _unwrap_variable_expression(body[colon + 1:].strip())
        if not collection:
            continue

        names = [name.strip() for name in body[:colon].split(",")]
        if not names or not all(IDENTIFIER.fullmatch(name) for name in names):
            continue

        item = names[0]
        info.iterator_vars.add(item)
        info.parent_vars[item] = collection

        if len(names) > 1:
            stat = names[1]
            info.iterator_vars.add(stat)
            info.stat_vars[stat] = collection

    return info


def find_variable_references(text: str) -> List[VariableReference]:
    """Variable paths in `text` with the offset of their expression and whether an iterator leads them."""
    info = find_iterator_variables(text)
    visible = strip_escaped_expressions(text)
    references = []

    for source, path in find_all_variable_matches(text):
        start_index = visible.find(source)
        if start_index == -1:
            continue
        references.append(VariableReference(
            variable=path,
            start_index=start_index,
            is_iterator_var=path.split(".")[0] in info.iterator_vars,
        ))

    return references


def _unwrap_variable_expression(expression: str) -> str:
    if len(expression) < 3 or expression[0] not in "$*" or expression[1] != "{":
        return ""
    if find_closing(expression, 1) != len(expression) - 1:
        return ""
    return expression[2:-1].strip()


def _scan_text(text: str, collector: _MatchCollector):
    for start, stop in expression_spans(text):
        _scan_expression(text[start:stop], collector)


def _scan_expression(expression: str, collector: _MatchCollector):
    prefix = expression[0]
    body = expression[2:-1]

    if prefix in "$*":
        _analyze_body(body, expression, collector)
    elif prefix == "#":
        _scan_message(body, expression, collector)
    elif prefix == "@":
        _scan_link(body, collector)
    elif prefix == "~":
        _scan_fragment(body, collector)


def _scan_message(body: str, source: str, collector: _MatchCollector):
    paren = find_top_level(body, "(")
    key = (body[:paren] if paren != -1 else body).strip()

    if EXPRESSION_START.search(key):
        _scan_text(key, collector)
    elif key and not is_string_literal(key):
        collector.add(source, key)

    if paren == -1:
        return

    close = find_closing(body, paren)
    args = body[paren + 1:close] if close != -1 else body[paren + 1:]
    for arg in split_parameters(args):
        if EXPRESSION_START.search(arg):
            _scan_text(arg, collector)
        elif not is_string_literal(arg) and not is_numeric_literal(arg):
            _analyze_body(arg, source, collector)


def _scan_link(body: str, collector: _MatchCollector):
    paren = find_top_level(body, "(")
    if paren == -1:
        _scan_text(body, collector)
        return

    _scan_text(body[:paren], collector)
    close = find_closing(body, paren)
    params = body[paren + 1:close] if close != -1 else body[paren + 1:]
    for param in split_parameters(params):
        index = find_assignment(param)
        _scan_text(param[index + 1:] if index != -1 else param, collector)


def _scan_fragment(body: str, collector: _MatchCollector):
    separator = find_top_level(body, "::")
    if separator == -1:
        _scan_text(body, collector)
        return

    _scan_text(body[:separator], collector)
    selector = body[separator + 2:]
    paren = find_top_level(selector, "(")
    if paren == -1:
        _scan_text(selector, collector)
        return

    _scan_text(selector[:paren], collector)
    close = find_closing(selector, paren)
    args = selector[paren + 1:close] if close != -1 else selector[paren + 1:]
    for arg in split_parameters(args):
        index = find_assignment(arg)
        _scan_text(arg[index + 1:] if index != -1 else arg, collector)


def _analyze_body(body: str, source: str, collector: _MatchCollector):
    tokens = tokenize(body)
    partners = match_brackets(tokens)
    _walk(tokens, partners, 0, len(tokens), source, collector)


def _walk(tokens, partners, start: int, end: int, source: str, collector: _MatchCollector):
    i = start
    while i < end:
        token = tokens[i]
        if token.kind == "nested":
            _scan_expression(token.text, collector)
            i += 1
        elif token.kind in ("ident", "utility", "bean"):
            i = _walk_chain(tokens, partners, i, end, source, collector)
        else:
            i += 1


def _is(tokens, index: int, end: int, kind: str, text: str | None = None) -> bool:
    if index >= end:
        return False
    token = tokens[index]
    return token.kind == kind and (text is None or token.text == text)


def _walk_chain(tokens, partners, i: int, end: int, source: str, collector: _MatchCollector) -> int:
    """
    Consume one property chain starting at `tokens[i]` and return the index after it.

    The chain's prefixes are emitted first, then everything nested in it
    (call arguments, filter conditions, computed indexes) is walked as
    independent sub-expressions attributed to the same source.
    """
    head = tokens[i]
    segments = []
    emit = True
    field_object = False
    deferred = []
    j = i + 1

    if head.kind == "ident":
        name = head.text
        if name == "new":
            emit = False
            while _is(tokens, j, end, "ident") or _is(tokens, j, end, "dot"):
                j += 1
        elif name == "T" and _is(tokens, j, end, "open", "("):
            emit = False
            j = partners[j] + 1
        elif is_reserved_word(name) or is_security_function(name) or not name.strip("_"):
            emit = False
        else:
            segments.append(name)
    elif head.kind == "utility":
        emit = False
        field_object = head.text == "#fields"
        if _is(tokens, j, end, "dot") and _is(tokens, j + 1, end, "ident"):
            member = tokens[j + 1].text
            if head.text in VARIABLE_SCOPE_OBJECTS or (head.text == "#authentication" and member == "principal"):
                emit = True
                segments.append(member)
                j += 2
    else:
        emit = False

    after_filter = False
    while j < end:
        token = tokens[j]

        if token.kind in ("dot", "safe") and _is(tokens, j + 1, end, "ident"):
            name = tokens[j + 1].text
            j += 2
            if _is(tokens, j, end, "open", "("):
                close = partners[j]
                no_args = close == j + 1
                if emit and not (after_filter and no_args and name in AGGREGATE_METHODS):
                    segments.append(name)
                if field_object and name in FIELD_METHODS:
                    _emit_field_path(tokens, j + 1, close, source, collector)
                deferred.append((j + 1, min(close, end)))
                j = close + 1
            elif emit:
                segments.append(name)
            continue

        if token.kind == "dot" and _is(tokens, j + 1, end, "open", "{"):
            close = partners[j + 1]
            deferred.append((j + 2, min(close, end)))
            after_filter = True
            j = close + 1
            continue

        if token.kind == "filter" and _is(tokens, j + 1, end, "open", "["):
            close = partners[j + 1]
            deferred.append((j + 2, min(close, end)))
            after_filter = True
            j = close + 1
            continue

        if _is(tokens, j, end, "open", "("):
            close = partners[j]
            deferred.append((j + 1, min(close, end)))
            j = close + 1
            continue

        if _is(tokens, j, end, "open", "["):
            close = partners[j]
            inner = tokens[j + 1:close]
            key = unquote(inner[0].text) if len(inner) == 1 and inner[0].kind == "string" else ""
            if emit and segments and IDENTIFIER.fullmatch(key):
                segments.append(key)
            else:
                deferred.append((j + 1, min(close, end)))
            j = close + 1
            continue

        break

    if emit:
        collector.add_chain(source, segments)

    for start, stop in deferred:
        _walk(tokens, partners, start, stop, source, collector)

    return j


def _emit_field_path(tokens, start: int, end: int, source: str, collector: _MatchCollector):
    if start >= end or tokens[start].kind != "string":
        return
    path = unquote(tokens[start].text).strip()
    if path in FIELD_WILDCARDS or not PROPERTY_PATH.fullmatch(path):
        return
    collector.add_chain(source, path.split("."))
