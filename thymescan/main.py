import argparse
import sys
from pathlib import Path

from thymescan.cli.prompts import ask_scan_config, process_cli_config
from thymescan.config.base import (
    ACTION_SCAN_VARIABLES, ACTION_SCAN_REFERENCES, ACTION_GENERATE_DATA, ACTION_LIST_FRAGMENTS,
    ACTION_CREATE_WORKSPACE, CLI_ACTIONS, DEFAULT_TEMPLATE_PATH, DEFAULT_STATIC_PATH, DEFAULT_DATA_PATH
)
from thymescan.config.package import PACKAGE_NAME, PACKAGE_VERSION
from thymescan.config.project import ProjectConfig
from thymescan.parsers.variables import find_all_variable_matches, find_iterator_variables
from thymescan.resolvers.fragments import build_fragment_catalog
from thymescan.resolvers.templates import TemplateResolver
from thymescan.resolvers.variables import VariableStore
from thymescan.utils.file import read_text
from thymescan.utils.logs import Log
from thymescan.utils.scaffold import scaffold_workspace


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PACKAGE_NAME,
        description="Analyze Thymeleaf templates. Run without arguments for interactive mode.",
    )
    parser.add_argument("action", choices=list(CLI_ACTIONS))
    parser.add_argument("target", nargs="?", help="Template file for variables/references/generate")
    parser.add_argument("--workspace", dest="workspace_path", default=None)
    parser.add_argument("--templates", dest="template_path", default=DEFAULT_TEMPLATE_PATH)
    parser.add_argument("--static", dest="static_path", default=DEFAULT_STATIC_PATH)
    parser.add_argument("--data", dest="data_path", default=DEFAULT_DATA_PATH)
    parser.add_argument("--name", dest="project_name", default=None, help="Workspace name for 'workspace'")
    parser.add_argument("--version", action="version", version=f"{PACKAGE_NAME} {PACKAGE_VERSION}")
    return parser


def scan_variables(config: ProjectConfig):
    text = read_text(config.target)
    if text is None:
        return

    matches = find_all_variable_matches(text)
    info = find_iterator_variables(text)
    Log.scanned(str(config.target), len(matches), "variable paths")

    for source, path in matches:
        marker = " (iterator)" if path.split(".")[0] in info.iterator_vars else ""
        Log.detail(f"  {path}{marker}  <- {source}")

    for item, collection in info.parent_vars.items():
        Log.info(f"  th:each {item} -> {collection}")


def scan_references(config: ProjectConfig):
    text = read_text(config.target)
    if text is None:
        return

    resolver = TemplateResolver(config)
    links = resolver.document_links(text)
    Log.scanned(str(config.target), len(links), "references")

    lines = text.splitlines()
    for link in links:
        reference = f"{link.path} ({link.line + 1}:{link.start + 1})"
        location = resolver.resolve(lines[link.line], link.start)
        if location:
            Log.resolved(reference, f"{location.file}:{location.line + 1}")
        else:
            Log.unresolved(reference)


def generate_data(config: ProjectConfig):
    data_file = VariableStore(config).generate(config.target)
    if data_file:
        Log.completed("Variable data generation", str(data_file))


def list_fragments(config: ProjectConfig):
    catalog = build_fragment_catalog(config.template_root, config.file_extension)
    if not catalog:
        Log.warning(f"No fragments found in {config.template_root}")
        return

    for template, definitions in catalog.items():
        Log.info(template)
        for definition in definitions:
            parameters = f"({', '.join(definition.parameters)})" if definition.parameters else ""
            Log.detail(f"  {definition.name}{parameters}  line {definition.line + 1}")


def create_workspace(config: ProjectConfig):
    workspace = scaffold_workspace(
        config.workspace_path,
        config.options["project_name"],
        template_path=config.template_path,
        static_path=config.static_path,
        data_path=config.data_path,
    )
    if workspace:
        Log.created(str(workspace))


ACTIONS = {
    ACTION_SCAN_VARIABLES: scan_variables,
    ACTION_SCAN_REFERENCES: scan_references,
    ACTION_GENERATE_DATA: generate_data,
    ACTION_LIST_FRAGMENTS: list_fragments,
    ACTION_CREATE_WORKSPACE: create_workspace,
}


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv

    if argv:
        args = build_parser().parse_args(argv)
        try:
            config = process_cli_config(vars(args))
        except ValueError as e:
            Log.error(str(e))
            return 1
    else:
        scan_config = ask_scan_config()
        if scan_config is None:
            return 1

        config = ProjectConfig(
            workspace_path=Path(scan_config["workspace_path"]),
            template_path=scan_config.get("template_path", DEFAULT_TEMPLATE_PATH),
            static_path=scan_config.get("static_path", DEFAULT_STATIC_PATH),
            data_path=scan_config.get("data_path", DEFAULT_DATA_PATH),
            action=scan_config["action"],
            target=scan_config.get("target"),
            options=scan_config.get("options", {}),
        )

    ACTIONS[config.action](config)
    return 0
