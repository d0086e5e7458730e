"""
Line-oriented console for the query assistant.

Commands:
    :gen <prompt>   generate SQL for a natural language request
    :edit <sql>     replace the SQL by hand (drops the history link)
    :run            execute the current SQL
    :history        reload the history log
    :quit           exit
Any line that does not start with ":" is treated as ":gen <line>".
"""

import argparse
import asyncio
from typing import List, Optional

from .config import get_settings
from .domain.outcomes import ErrorOutcome
from .domain.state import WorkflowState
from .infrastructure.backend_client import BackendClient
from .services.result_projector import project
from .services.workflow import WorkflowCoordinator
from .utils.logging import configure_logging, get_module_logger

logger = get_module_logger()

PROMPT = "query> "


def render_query(state: WorkflowState) -> List[str]:
    if not state.query.text:
        return []
    title = "Generated SQL"
    if state.query.origin_id is not None:
        title += f" (ID: {state.query.origin_id})"
    return [f"=== {title} ===", state.query.text]


def render_error(title: str, error: Optional[ErrorOutcome]) -> List[str]:
    if error is None:
        return []
    return [f"!!! {title}", error.message]


def render_result(state: WorkflowState) -> List[str]:
    lines: List[str] = []
    if state.query_message:
        lines += ["=== Execution complete ===", state.query_message]

    if state.query_result is None or state.execution_error is not None:
        return lines

    table = project(state.query_result)
    if not table.rows or not table.columns:
        return lines + ["No rows returned."]

    widths = [
        max(len(column), *(len(row[i]) for row in table.rows))
        for i, column in enumerate(table.columns)
    ]
    lines.append(" | ".join(column.ljust(width) for column, width in zip(table.columns, widths)))
    lines.append("-+-".join("-" * width for width in widths))
    for row in table.rows:
        lines.append(" | ".join(cell.ljust(width) for cell, width in zip(row, widths)))
    return lines


def render_history(state: WorkflowState) -> List[str]:
    lines = ["=== Recent History ==="]
    lines += render_error("Failed to load history", state.history_error)
    if not state.history and state.history_error is None:
        lines.append("No history yet. Generate a query to get started.")
    for entry in state.history:
        badge = "[Executed]" if entry.executed else "[Not Executed]"
        lines.append(f"{badge} #{entry.id} {entry.natural}")
        lines.append(f"    {entry.sql}")
    return lines


async def handle_line(coordinator: WorkflowCoordinator, line: str) -> Optional[List[str]]:
    """Run one console command; returns the lines to print, None to quit."""
    command, _, argument = line.strip().partition(" ")

    if command == ":quit":
        return None
    if command == ":edit":
        state = coordinator.edit_query(argument)
        return render_query(state)
    if command == ":run":
        state = await coordinator.run()
        return render_error("SQL failed", state.execution_error) + render_result(state) + render_history(state)
    if command == ":history":
        state = await coordinator.refresh_history()
        return render_history(state)

    prompt = argument if command == ":gen" else line
    state = await coordinator.generate(prompt)
    return render_error("Failed to generate SQL", state.generation_error) + render_query(state)


async def run_console(base_url: Optional[str] = None) -> None:
    settings = get_settings()
    backend_config = settings.backend
    if base_url:
        backend_config = backend_config.model_copy(update={"base_url": base_url})

    client = BackendClient(backend_config)
    await client.connect()
    try:
        coordinator = WorkflowCoordinator.from_client(client)
        state = await coordinator.start()
        print("\n".join(render_history(state)))

        while True:
            try:
                line = await asyncio.to_thread(input, PROMPT)
            except EOFError:
                break
            if not line.strip():
                continue

            output = await handle_line(coordinator, line)
            if output is None:
                break
            print("\n".join(output))
    finally:
        await client.close()


def main() -> None:
    ap = argparse.ArgumentParser(description="Generate, edit and run SQL from natural language")
    ap.add_argument("--base-url", type=str, default=None, help="Backend URL (overrides BACKEND__BASE_URL)")
    args = ap.parse_args()

    configure_logging()
    logger.info("Starting query assistant console")

    try:
        asyncio.run(run_console(args.base_url))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
