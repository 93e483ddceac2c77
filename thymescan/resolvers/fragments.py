import re
from pathlib import Path
from typing import Dict, List, Optional, Union

from bs4 import BeautifulSoup

from thymescan.config.base import FRAGMENT_ATTRIBUTES, TEMPLATE_EXTENSION
from thymescan.models import FragmentDefinition
from thymescan.parsers.expression import split_parameters
from thymescan.utils.file import find_files_with_extension, read_text, relative_template_name

FRAGMENT_SIGNATURE = re.compile(r"^\s*([\w-]+)\s*(?:\((.*)\))?\s*$", re.DOTALL)


def parse_fragment_signature(value: str):
    """`header(title, subtitle)` -> `('header', ['title', 'subtitle'])`."""
    m = FRAGMENT_SIGNATURE.match(value)
    if not m:
        return value.strip(), []
    parameters = [param.split("=", 1)[0].strip() for param in split_parameters(m.group(2) or "")]
    return m.group(1), parameters


def collect_fragment_definitions(html: str, file: Optional[Path] = None) -> List[FragmentDefinition]:
    """List every fragment declared in a template, in document order."""
    soup = BeautifulSoup(html, "html.parser")
    definitions = []

    for tag in soup.find_all(True):
        for attribute in FRAGMENT_ATTRIBUTES:
            value = tag.get(attribute)
            if not value:
                continue
            name, parameters = parse_fragment_signature(value)
            definitions.append(FragmentDefinition(
                name=name,
                parameters=parameters,
                line=(tag.sourceline or 1) - 1,
                character=tag.sourcepos or 0,
                file=file,
            ))

    return definitions


def build_fragment_catalog(
        template_root: Union[str, Path],
        extension: str = TEMPLATE_EXTENSION
) -> Dict[str, List[FragmentDefinition]]:
    """Fragments declared under `template_root`, keyed by template name without extension."""
    template_root = Path(template_root)
    catalog = {}

    for file in find_files_with_extension(template_root, extension):
        html = read_text(file)
        if html is None:
            continue
        definitions = collect_fragment_definitions(html, file)
        if definitions:
            catalog[relative_template_name(file, template_root, extension)] = definitions

    return catalog
