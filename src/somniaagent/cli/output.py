"""
CLI 출력 유틸리티

- stdout: 기계가 읽는 데이터 (JSON)
- stderr: 사람이 읽는 로그 (진행 상황, 오류, 결과 표)
"""

from typing import Any, Optional
import json
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

# 사람이 읽는 출력은 stderr
console = Console(stderr=True)


def output_json(data: Any, indent: Optional[int] = 2) -> None:
    print(json.dumps(data, indent=indent, default=str), flush=True)


def log_info(message: str, quiet: bool = False) -> None:
    if not quiet:
        console.print(f"[blue]ℹ[/blue] {escape(message)}")


def log_success(message: str, quiet: bool = False) -> None:
    if not quiet:
        console.print(f"[green]✓[/green] {escape(message)}")


def log_warning(message: str, quiet: bool = False) -> None:
    if not quiet:
        console.print(f"[yellow]⚠[/yellow] {escape(message)}", style="yellow")


def log_error(message: str) -> None:
    """오류 출력 (항상 표시)"""
    console.print(f"[red]✗[/red] {escape(message)}", style="bold red")


def print_header(title: str) -> None:
    console.print(f"\n[bold cyan]{title}[/bold cyan]\n")


def key_value_table(rows: Any, title: Optional[str] = None) -> Table:
    """(라벨, 값) 목록을 2열 표로 변환"""
    table = Table(title=title, show_header=False, box=None, padding=(0, 2))
    table.add_column(style="cyan")
    table.add_column()
    for label, value in rows:
        table.add_row(str(label), str(value))
    return table


def setup_logging(level: str = "WARNING") -> None:
    """SDK 로거를 rich 핸들러로 stderr에 연결"""
    logging.basicConfig(
        level=level.upper(),
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
