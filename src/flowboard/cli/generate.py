"""Init command for creating a default board config."""

import logging
from pathlib import Path

import yaml

from ..models import FlowboardConfig
from ..services.config_service import ConfigService
from .output import info, success

logger = logging.getLogger(__name__)

CONFIG_FILE = ConfigService.CONFIG_FILE

# Header comments for generated file
CONFIG_HEADER = """\
# flowboard Board Configuration
#
# task_root: Relative path to directory containing task files
#
# Column constraints:
#   - Between 1 and 12 columns, listed in display order
#   - Column IDs must be lowercase with underscores only
#   - wip_limit: optional maximum number of tasks in the column;
#     omit it for an unlimited column
#
# Example:
#   columns:
#     - id: backlog
#       name: "Backlog"
#     - id: doing
#       name: "Doing"
#       wip_limit: 2
#     - id: done
#       name: "Done"

"""


def generate_config_yaml(task_root: str = ".tasks") -> str:
    """Generate YAML config from the default FlowboardConfig model.

    Args:
        task_root: The task directory path to include in config
    """
    config_dict = FlowboardConfig.default().model_dump()
    config_dict["task_root"] = task_root

    # Unlimited columns are written without a wip_limit key
    for col in config_dict["board"]["columns"]:
        if col.get("wip_limit") is None:
            col.pop("wip_limit", None)

    yaml_content = yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=False)
    return CONFIG_HEADER + yaml_content


def run_generate(project_root: Path, task_root: str = ".tasks") -> int:
    """
    Generate default configuration and task directory.

    Args:
        project_root: Path where flowboard.yml will be created
        task_root: Task directory name relative to project_root

    Returns:
        Exit code (0 = success, 1 = nothing to do)
    """
    config_created = False
    dir_created = False

    config_path = project_root / CONFIG_FILE

    if config_path.exists():
        info(f"Config exists: {config_path}")
        task_root = ConfigService(project_root).get_config().task_root
    else:
        project_root.mkdir(parents=True, exist_ok=True)
        config_path.write_text(generate_config_yaml(task_root))
        success(f"Generated config: {config_path}")
        logger.info("Generated %s", config_path)
        config_created = True

    task_dir = project_root / task_root
    if not task_dir.exists():
        task_dir.mkdir(parents=True)
        success(f"Created directory: {task_dir}/")
        dir_created = True
    else:
        info(f"Directory exists: {task_dir}/")

    if not config_created and not dir_created:
        print("Nothing to generate.")
        return 1

    return 0
