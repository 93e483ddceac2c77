from pathlib import Path
from typing import Optional, Union

from cookiecutter.exceptions import CookiecutterException
from cookiecutter.main import cookiecutter

from thymescan.config.base import (
    WORKSPACE_TEMPLATE, DEFAULT_TEMPLATE_PATH, DEFAULT_STATIC_PATH, DEFAULT_DATA_PATH
)
from thymescan.utils.logs import Log

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / WORKSPACE_TEMPLATE


def scaffold_workspace(
        output_dir: Union[str, Path],
        project_name: str,
        template_path: str = DEFAULT_TEMPLATE_PATH,
        static_path: str = DEFAULT_STATIC_PATH,
        data_path: str = DEFAULT_DATA_PATH,
        overwrite: bool = False,
) -> Optional[Path]:
    """
    Create a preview workspace with a starter layout, page, fragment and data files.

    Returns the workspace folder, or None if generation failed.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        workspace = cookiecutter(
            str(TEMPLATE_DIR),
            output_dir=str(output_dir),
            no_input=True,
            overwrite_if_exists=overwrite,
            extra_context={
                'project_name': project_name,
                'template_path': template_path,
                'static_path': static_path,
                'data_path': data_path,
            },
        )
    except CookiecutterException as e:
        Log.error(f"Workspace creation failed: {e}")
        return None

    Log.success("Preview workspace created successfully")
    return Path(workspace)
