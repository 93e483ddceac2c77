from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple, Optional


class ExpressionMatch(NamedTuple):
    """A variable path found inside an expression, paired with the expression text."""
    source: str
    path: str


@dataclass
class IteratorInfo:
    iterator_vars: set[str] = field(default_factory=set)
    parent_vars: dict[str, str] = field(default_factory=dict)
    stat_vars: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TemplateReference:
    path: str
    start_index: int

    @property
    def end_index(self) -> int:
        return self.start_index + len(self.path)


@dataclass(frozen=True)
class FragmentReference:
    template_file: str
    fragment_id: Optional[str]


@dataclass(frozen=True)
class TextPosition:
    line: int
    character: int


@dataclass(frozen=True)
class VariableReference:
    variable: str
    start_index: int
    is_iterator_var: bool


@dataclass
class FragmentDefinition:
    name: str
    parameters: list[str]
    line: int
    character: int
    file: Optional[Path] = None


@dataclass(frozen=True)
class Location:
    file: Path
    line: int = 0
    character: int = 0


@dataclass(frozen=True)
class DocumentLink:
    line: int
    start: int
    end: int
    path: str


@dataclass
class VariableDefinition:
    file: Path
    line: int
    character: int = 0
    value: Any = None


@dataclass(frozen=True)
class CompletionCandidate:
    name: str
    type: str
    source: str
    detail: str
