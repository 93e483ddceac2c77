from dataclasses import dataclass, field
from pathlib import Path

from thymescan.config.base import (
    DEFAULT_TEMPLATE_PATH, DEFAULT_STATIC_PATH, DEFAULT_DATA_PATH, TEMPLATE_EXTENSION, CACHE_TTL
)


@dataclass
class ProjectConfig:
    workspace_path: Path
    template_path: str = DEFAULT_TEMPLATE_PATH
    static_path: str = DEFAULT_STATIC_PATH
    data_path: str = DEFAULT_DATA_PATH
    file_extension: str = TEMPLATE_EXTENSION
    cache_ttl: float = CACHE_TTL
    action: str = ""
    target: Path | None = None
    options: dict = field(default_factory=dict)

    @property
    def template_root(self) -> Path | None:
        return self.workspace_path / self.template_path if self.template_path else None

    @property
    def static_root(self) -> Path | None:
        return self.workspace_path / self.static_path if self.static_path else None

    @property
    def data_root(self) -> Path | None:
        return self.workspace_path / self.data_path if self.data_path else None
