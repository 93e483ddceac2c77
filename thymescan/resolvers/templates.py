import posixpath
import re
from pathlib import Path
from typing import List, Optional

from thymescan.config.project import ProjectConfig
from thymescan.models import DocumentLink, Location, TemplateReference
from thymescan.parsers.definitions import (
    find_fragment_in_text,
    find_template_references,
    get_possible_static_paths,
    is_dynamic_link,
    is_fragment_definition,
    normalize_path,
    normalize_resource_path,
)
from thymescan.utils.cache import TTLCache
from thymescan.utils.file import find_files_with_extension, list_files, read_text

SELECTOR_PATTERN = re.compile(r"\s*::\s*([\w-]+)")


class TemplateResolver:
    """
    Resolves template, fragment and static resource references to files.

    File listings and fragment positions are cached for `config.cache_ttl`
    seconds; call `clear_cache()` after files are created or deleted.
    """

    def __init__(self, config: ProjectConfig):
        self.config = config
        self._files = TTLCache(config.cache_ttl)
        self._fragments = TTLCache(config.cache_ttl)

    def clear_cache(self):
        self._files.clear()
        self._fragments.clear()

    def template_files(self) -> List[str]:
        root = self.config.template_root
        if root is None:
            return []
        return self._files.get(("templates", root), lambda: [
            path.relative_to(root).as_posix()
            for path in find_files_with_extension(root, self.config.file_extension)
        ])

    def static_files(self) -> List[str]:
        root = self.config.static_root
        if root is None:
            return []
        return self._files.get(("static", root), lambda: [path.as_posix() for path in list_files(root)])

    def document_links(self, text: str) -> List[DocumentLink]:
        """Clickable ranges for every reference, skipping fragment declarations and computed links."""
        links = []
        for line_number, line in enumerate(text.splitlines()):
            if is_fragment_definition(line) or is_dynamic_link(line):
                continue
            for reference in find_template_references(line):
                links.append(DocumentLink(
                    line=line_number,
                    start=reference.start_index,
                    end=reference.end_index,
                    path=reference.path,
                ))
        return links

    def resolve(self, line: str, character: int) -> Optional[Location]:
        """Location of the reference under `character` on `line`, if it resolves to a file."""
        for reference in find_template_references(line):
            if not reference.start_index <= character <= reference.end_index:
                continue
            if self._is_link(line, reference):
                return self.find_static_resource(reference.path)
            return self.find_fragment_definition(reference.path, self._selector_after(line, reference))
        return None

    def find_static_resource(self, path: str) -> Optional[Location]:
        root = self.config.static_root
        if root is None:
            return None

        resource = normalize_resource_path(normalize_path(path))
        files = set(self.static_files())
        for candidate in [resource, *get_possible_static_paths(resource)]:
            if candidate in files:
                return Location(file=root / candidate)
        return None

    def find_fragment_definition(self, template_file: str, fragment_id: Optional[str] = None) -> Optional[Location]:
        """
        Find the file of `template_file` and, when given, the line declaring `fragment_id` in it.

        An empty `template_file` searches every template for the fragment.
        """
        root = self.config.template_root
        if root is None:
            return None

        if not template_file:
            if not fragment_id:
                return None
            for name in self.template_files():
                location = self._fragment_location(root / name, fragment_id)
                if location:
                    return location
            return None

        name = posixpath.normpath(normalize_path(template_file))
        if not name.lower().endswith(self.config.file_extension):
            name += self.config.file_extension
        if name not in self.template_files():
            return None

        target = root / name
        if not fragment_id:
            return Location(file=target)
        return self._fragment_location(target, fragment_id) or Location(file=target)

    def _fragment_location(self, file: Path, fragment_id: str) -> Optional[Location]:
        def locate():
            text = read_text(file)
            position = find_fragment_in_text(text, fragment_id) if text else None
            if position is None:
                return None
            return Location(file=file, line=position.line, character=position.character)

        return self._fragments.get((file, fragment_id), locate)

    @staticmethod
    def _is_link(line: str, reference: TemplateReference) -> bool:
        before = line[:reference.start_index]
        link = before.rfind("@{")
        return link != -1 and link > max(before.rfind("~{"), before.rfind('="'), before.rfind("='"))

    @staticmethod
    def _selector_after(line: str, reference: TemplateReference) -> Optional[str]:
        m = SELECTOR_PATTERN.match(line, reference.end_index)
        return m.group(1) if m else None
