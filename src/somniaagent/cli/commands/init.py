"""somniaagent init - 템플릿으로 새 에이전트 프로젝트 생성"""

from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ...core.types import AgentConfig, AgentType
from ..errors import exit_on_error
from ..output import console, key_value_table, log_error, log_success, print_header
from ..project import CONFIG_FILE, write_agent_config
from ..templates import TEMPLATES, render_project


class TemplateName(str, Enum):
    defi_trading = "defi-trading"
    gaming_npc = "gaming-npc"
    custom = "custom"


def init_project(
    name: Annotated[str, typer.Option("--name", "-n", help="Agent name")] = "my-agent",
    template: Annotated[
        TemplateName, typer.Option("--template", help="Project template")
    ] = TemplateName.defi_trading,
    agent_type: Annotated[
        Optional[AgentType],
        typer.Option("--type", "-t", help="Agent type (defaults to the template's type)"),
    ] = None,
    directory: Annotated[
        Path, typer.Option("--dir", "-d", help="Parent directory for the project")
    ] = Path("."),
    force: Annotated[
        bool, typer.Option("--force", help="Overwrite files in an existing directory")
    ] = False,
):
    """Initialize a new AI agent project.

    Examples:

        somniaagent init --name MyTradingBot --template defi-trading
    """
    print_header("Initialize New AI Agent")
    template_spec = TEMPLATES[template.value]
    project_dir = directory / name

    if project_dir.exists() and not force:
        log_error(f'Directory "{project_dir}" already exists (use --force to overwrite)')
        raise typer.Exit(code=1)

    with exit_on_error():
        config = AgentConfig(
            name=name,
            type=agent_type or template_spec.agent_type,
            autonomy=template_spec.autonomy,
            triggers=template_spec.triggers,
            network="testnet",
        )
        project_dir.mkdir(parents=True, exist_ok=True)
        write_agent_config(project_dir / CONFIG_FILE, config)
        for filename, content in render_project(name, template.value).items():
            (project_dir / filename).write_text(content, encoding="utf-8")

    log_success("Project created successfully!")
    console.print(
        key_value_table(
            [
                ("Project", project_dir),
                ("Type", config.type.value),
                ("Template", template_spec.title),
                ("Triggers", ", ".join(config.triggers)),
            ]
        )
    )
    console.print("\n[bold]Next steps:[/bold]")
    console.print(f"  1. cd {project_dir}")
    console.print("  2. cp .env.example .env")
    console.print("  3. somniaagent test")
    console.print("  4. somniaagent deploy --mock")
