import re
from pathlib import Path

import questionary
from questionary import Style

from thymescan.config.base import (
    SUPPORTED_ACTIONS, CLI_ACTIONS, TEMPLATE_ACTIONS, ACTION_CREATE_WORKSPACE,
    DEFAULT_WORKSPACE_PATH, DEFAULT_TEMPLATE_PATH, DEFAULT_STATIC_PATH, DEFAULT_DATA_PATH,
    TEMPLATE_EXTENSION, CACHE_TTL
)
from thymescan.config.project import ProjectConfig
from thymescan.utils.file import folder_exists, file_exists
from thymescan.utils.logs import Log

CUSTOM_QMARK = "›"

fresh_style = Style([
    ('qmark', 'fg:#56A8F5 bold'),
    ('question', 'bold'),
    ('selected', 'fg:#FFFFFF bg:#673AB7'),
    ('pointer', 'fg:#56A8F5 bold'),
    ('answer', 'fg:#6AAB73 bold'),
    ('error', 'fg:#F75464 bold'),
])


def is_valid_project_name(name: str):
    """Workspace names become folder names: letters, digits, spaces and dashes."""
    if not name or not name.strip():
        return "Project name cannot be empty."
    if not re.match(r'^[A-Za-z][A-Za-z0-9 -]*$', name.strip()):
        return "Start with a letter; use letters, digits, spaces or dashes only."
    return True


def validate_folder_exists(path_str: str):
    """Ensure the given path exists and is a folder."""
    path = Path(path_str.strip() or ".")
    if not path.exists():
        return f"Path does not exist: {path}"
    if not path.is_dir():
        return f"Not a folder: {path}"
    return True


def validate_template_file(path_str: str):
    path = Path(path_str.strip())
    if not path_str.strip() or not path.is_file():
        return f"Not a file: {path}"
    if path.suffix.lower() != TEMPLATE_EXTENSION:
        return f"Not a {TEMPLATE_EXTENSION} template: {path}"
    return True


def safe_ask(prompt):
    """Helper: exit cleanly if the user cancels (Ctrl+C or Esc)."""
    if prompt is None:
        Log.error("\n Exiting...\n")
        exit(0)
    return prompt


def ask_scan_config():
    action = safe_ask(questionary.select(
        "Select Action:",
        choices=SUPPORTED_ACTIONS,
        style=fresh_style,
        qmark=CUSTOM_QMARK,
    ).ask())

    if action == ACTION_CREATE_WORKSPACE:
        project_name = safe_ask(questionary.text(
            "Workspace Name:",
            validate=is_valid_project_name,
            style=fresh_style,
            qmark=CUSTOM_QMARK
        ).ask())

        output_path = safe_ask(questionary.path(
            "Output Folder Path:",
            default=DEFAULT_WORKSPACE_PATH,
            style=fresh_style,
            qmark=CUSTOM_QMARK,
            validate=validate_folder_exists,
            only_directories=True
        ).ask())

        return {
            "action": action,
            "workspace_path": Path(output_path).resolve(),
            "options": {"project_name": project_name.strip()},
        }

    workspace_path = safe_ask(questionary.path(
        "Workspace Folder Path:",
        default=DEFAULT_WORKSPACE_PATH,
        style=fresh_style,
        qmark=CUSTOM_QMARK,
        validate=validate_folder_exists,
        only_directories=True
    ).ask())

    template_path = safe_ask(questionary.text(
        "Templates Folder (relative to workspace):",
        default=DEFAULT_TEMPLATE_PATH,
        style=fresh_style,
        qmark=CUSTOM_QMARK,
    ).ask())

    workspace = Path(workspace_path).resolve()
    if not folder_exists(workspace / template_path):
        Log.error(f"Templates folder not found: {workspace / template_path}")
        return None

    static_path = safe_ask(questionary.text(
        "Static Resources Folder (relative to workspace, leave blank if none):",
        default=DEFAULT_STATIC_PATH,
        style=fresh_style,
        qmark=CUSTOM_QMARK,
    ).ask())

    data_path = safe_ask(questionary.text(
        "Variable Data Folder (relative to workspace):",
        default=DEFAULT_DATA_PATH,
        style=fresh_style,
        qmark=CUSTOM_QMARK,
    ).ask())

    target = None
    if action in TEMPLATE_ACTIONS:
        target = safe_ask(questionary.path(
            "Template File:",
            default=str(workspace / template_path) + "/",
            style=fresh_style,
            qmark=CUSTOM_QMARK,
            validate=validate_template_file,
        ).ask())

    return {
        "action": action,
        "workspace_path": workspace,
        "template_path": template_path.strip(),
        "static_path": static_path.strip(),
        "data_path": data_path.strip(),
        "target": Path(target).resolve() if target else None,
        "options": {},
    }


def process_cli_config(cli_args) -> ProjectConfig:
    """Build a `ProjectConfig` from non-interactive arguments; raises ValueError when they are invalid."""
    if not cli_args.get('action'):
        raise ValueError("Missing required argument: --action")

    action = CLI_ACTIONS.get(cli_args['action'].lower())
    if action is None:
        raise ValueError(
            f"Unknown action '{cli_args['action']}'. Choose one of: {', '.join(CLI_ACTIONS)}"
        )

    workspace_path = Path(cli_args.get('workspace_path') or DEFAULT_WORKSPACE_PATH).resolve()

    if action == ACTION_CREATE_WORKSPACE:
        project_name = cli_args.get('project_name') or ""
        valid = is_valid_project_name(project_name)
        if valid is not True:
            raise ValueError(valid)
        return ProjectConfig(
            workspace_path=workspace_path,
            template_path=cli_args.get('template_path') or DEFAULT_TEMPLATE_PATH,
            static_path=cli_args.get('static_path') or DEFAULT_STATIC_PATH,
            data_path=cli_args.get('data_path') or DEFAULT_DATA_PATH,
            action=action,
            options={"project_name": project_name.strip()},
        )

    if not folder_exists(workspace_path):
        raise ValueError(f"Workspace folder does not exist: {workspace_path}")

    template_path = cli_args.get('template_path') or DEFAULT_TEMPLATE_PATH
    if not folder_exists(workspace_path / template_path):
        raise ValueError(f"Templates folder does not exist: {workspace_path / template_path}")

    target = None
    if action in TEMPLATE_ACTIONS:
        if not cli_args.get('target'):
            raise ValueError("Missing required argument: --target")
        target = Path(cli_args['target'])
        if not target.is_absolute():
            target = workspace_path / target
        if not file_exists(target):
            raise ValueError(f"Template file does not exist: {target}")

    static_path = cli_args.get('static_path')
    data_path = cli_args.get('data_path')

    return ProjectConfig(
        workspace_path=workspace_path,
        template_path=template_path,
        static_path=DEFAULT_STATIC_PATH if static_path is None else static_path,
        data_path=DEFAULT_DATA_PATH if data_path is None else data_path,
        cache_ttl=float(cli_args.get('cache_ttl') or CACHE_TTL),
        action=action,
        target=target.resolve() if target else None,
    )
