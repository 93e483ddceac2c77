"""
Primitives shared by the variable and template reference analyzers.

Everything here is a pure function of its arguments. Compiled patterns are
module constants; `re.Pattern` keeps no scan position between calls, so
concurrent callers never observe each other's state.
"""
import re
from typing import List, NamedTuple

from thymescan.config.base import RESERVED_WORDS, SECURITY_FUNCTIONS, OPERATORS

OPENERS = {"(": ")", "[": "]", "{": "}"}
CLOSERS = {v: k for k, v in OPENERS.items()}
QUOTES = ("'", '"')

EXPRESSION_START = re.compile(r"[$*#@~]\{")
REFERENCE_EXPRESSION_START = re.compile(r"[~@]\{")
ESCAPED_EXPRESSION_START = re.compile(r"\\([$*#@~])\{")
STRING_LITERAL = re.compile(r"""^(['"]).*\1$""", re.DOTALL)
NUMERIC_LITERAL = re.compile(r"^-?\d*\.?\d+[lLfFdD]?$")
IDENTIFIER = re.compile(r"[A-Za-z_]\w*")
PROPERTY_PATH = re.compile(r"[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*")

TOKEN_PATTERN = re.compile(r"""
    (?P<space>\s+)
  | (?P<string>'(?:\\.|''|[^'\\])*'|"(?:\\.|[^"\\])*")
  | (?P<nested>[$*#@~]\{)
  | (?P<utility>\#[A-Za-z_]\w*)
  | (?P<bean>@[A-Za-z_]\w*)
  | (?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?[lLfFdD]?(?!\w))
  | (?P<ident>[A-Za-z_]\w*)
  | (?P<filter>\.?[?^$!](?=\[))
  | (?P<safe>\?\.(?=[A-Za-z_]))
  | (?P<dot>\.)
  | (?P<open>[(\[{])
  | (?P<close>[)\]}])
  | (?P<op>\?:|==|!=|>=|<=|&&|\|\||[-+*/%<>=!?:,;|&^])
""", re.VERBOSE)


class Token(NamedTuple):
    kind: str
    text: str
    pos: int


def is_reserved_word(word: str) -> bool:
    return word.strip().lower() in RESERVED_WORDS


def is_security_function(word: str) -> bool:
    return word.strip() in SECURITY_FUNCTIONS


def is_operator(word: str) -> bool:
    return word.strip() in OPERATORS


def is_string_literal(value: str) -> bool:
    return bool(STRING_LITERAL.match(value.strip()))


def is_numeric_literal(value: str) -> bool:
    return bool(NUMERIC_LITERAL.match(value.strip()))


def unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] in QUOTES and value[-1] == value[0]:
        return value[1:-1]
    return value


def find_closing(text: str, open_index: int) -> int:
    """
    Return the index of the bracket closing the one at `open_index`.

    Nested brackets of the same kind and quoted strings are skipped.
    Returns -1 when the bracket is never closed, which is the normal case
    for text that is still being typed.
    """
    if open_index < 0 or open_index >= len(text) or text[open_index] not in OPENERS:
        return -1

    opener = text[open_index]
    closer = OPENERS[opener]
    depth = 0
    quote = None
    i = open_index

    while i < len(text):
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1

    return -1


def find_top_level(text: str, token: str, start: int = 0, end: int | None = None) -> int:
    """Find `token` outside quotes and brackets within text[start:end]; -1 if absent."""
    end = len(text) if end is None else end
    depth = 0
    quote = None
    i = start

    while i < end:
        char = text[i]
        if quote:
            if char == "\\":
                i += 2
                continue
            if char == quote:
                quote = None
        elif depth == 0 and text.startswith(token, i) and i + len(token) <= end:
            return i
        elif char in QUOTES:
            quote = char
        elif char in OPENERS:
            depth += 1
        elif char in CLOSERS and depth > 0:
            depth -= 1
        i += 1

    return -1


def find_assignment(text: str) -> int:
    """Index of the top-level `=` of a `name=value` pair, ignoring `==`, `!=`, `<=` and `>=`."""
    start = 0
    while True:
        index = find_top_level(text, "=", start)
        if index == -1:
            return -1
        before = text[index - 1] if index > 0 else ""
        after = text[index + 1] if index + 1 < len(text) else ""
        if after != "=" and before not in ("=", "!", "<", ">"):
            return index
        start = index + 2


def split_parameters(params: str) -> List[str]:
    """Split a parameter list on top-level commas, keeping quoted and bracketed commas."""
    result = []
    current = []
    depth = 0
    quote = None
    i = 0

    while i < len(params):
        char = params[i]
        if quote:
            if char == "\\" and i + 1 < len(params):
                current.append(params[i:i + 2])
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char in OPENERS:
            depth += 1
        elif char in CLOSERS and depth > 0:
            depth -= 1
        elif char == "," and depth == 0:
            param = "".join(current).strip()
            if param:
                result.append(param)
            current = []
            i += 1
            continue
        current.append(char)
        i += 1

    param = "".join(current).strip()
    if param:
        result.append(param)

    return result


def build_path_chain(segments: List[str]) -> List[str]:
    """`['user', 'address', 'street']` -> `['user', 'user.address', 'user.address.street']`."""
    chain = []
    current = ""
    for segment in segments:
        if not segment:
            continue
        current = f"{current}.{segment}" if current else segment
        chain.append(current)
    return chain


def strip_escaped_expressions(text: str) -> str:
    """
    Blank out every backslash-escaped expression (`\\${...}` and friends).

    The escaped span is replaced by spaces of the same length so offsets in
    the returned text still line up with the input.
    """
    if "\\" not in text:
        return text

    chars = list(text)
    pos = 0
    while True:
        m = ESCAPED_EXPRESSION_START.search(text, pos)
        if not m:
            break
        close = find_closing(text, m.end() - 1)
        stop = close + 1 if close != -1 else m.end()
        for i in range(m.start(), stop):
            if chars[i] != "\n":
                chars[i] = " "
        pos = stop

    return "".join(chars)


def expression_spans(text: str, start: int = 0, end: int | None = None):
    """Yield `(start, stop)` for every complete bracketed expression, outermost only."""
    end = len(text) if end is None else end
    pos = start
    while pos < end:
        m = EXPRESSION_START.search(text, pos, end)
        if not m:
            return
        close = find_closing(text, m.end() - 1)
        if close == -1 or close >= end:
            pos = m.end()
            continue
        yield m.start(), close + 1
        pos = close + 1


def tokenize(body: str) -> List[Token]:
    """Split an expression body into tokens; nested expressions stay whole."""
    tokens = []
    pos = 0
    while pos < len(body):
        m = TOKEN_PATTERN.match(body, pos)
        if not m:
            pos += 1
            continue

        kind = m.lastgroup
        if kind == "space":
            pos = m.end()
            continue

        if kind == "nested":
            close = find_closing(body, m.end() - 1)
            if close == -1:
                pos = m.end()
                continue
            tokens.append(Token(kind, body[pos:close + 1], pos))
            pos = close + 1
            continue

        tokens.append(Token(kind, m.group(0), pos))
        pos = m.end()

    return tokens


def match_brackets(tokens: List[Token]) -> dict[int, int]:
    """Map each opening token index to its closing token index (or len(tokens) if unclosed)."""
    partners = {}
    stack = []
    for index, token in enumerate(tokens):
        if token.kind == "open":
            stack.append(index)
        elif token.kind == "close":
            expected = CLOSERS[token.text]
            while stack and tokens[stack[-1]].text != expected:
                partners[stack.pop()] = index
            if stack:
                partners[stack.pop()] = index
    for index in stack:
        partners[index] = len(tokens)
    return partners
