"""Built-in help command.

Registered by the Dispatcher when ``use_default_help_command`` is set.
Lists the distinct registered commands grouped by their ``group``, or
shows the details of one command.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Dict, Iterable, List

from .base import Command

if TYPE_CHECKING:
    from ..context import Context


class HelpCommand(Command):
    """Show available commands or the usage of a single command."""

    invokes = ("help", "h", "?")
    description = "Display the list of commands or help for a specific command."
    help = "help - list all commands\nhelp <command> - show details of a command"
    group = "general"
    executable_in_dm = True

    async def execute(self, ctx: "Context") -> None:
        handler = ctx.handler
        prefix = ctx.used_prefix or handler.config.general_prefix
        if handler.config.space_after_prefix:
            prefix += " "

        if not ctx.args:
            await ctx.reply(self.render_overview(handler.command_instances, prefix))
            return

        invoke = ctx.args.get(0).as_str()
        command = handler.get_command(invoke)
        if command is None:
            await ctx.reply(f"Unknown command: {invoke}")
            return
        await ctx.reply(self.render_details(command, prefix))

    def render_overview(self, commands: Iterable[Command], prefix: str) -> str:
        groups: Dict[str, List[Command]] = defaultdict(list)
        for command in commands:
            groups[command.group or "general"].append(command)

        lines = ["Commands:"]
        for group in sorted(groups):
            lines.append("")
            lines.append(f"[{group}]")
            for command in groups[group]:
                line = f"  {prefix}{command.invokes[0]}"
                if command.description:
                    line += f" - {command.description}"
                lines.append(line)
        lines.append("")
        lines.append(f"Use {prefix}help <command> for details.")
        return "\n".join(lines)

    def render_details(self, command: Command, prefix: str) -> str:
        lines = [f"{prefix}{command.invokes[0]}"]
        if len(command.invokes) > 1:
            lines.append("Aliases: " + ", ".join(command.invokes[1:]))
        if command.description:
            lines.append(command.description)
        if command.help:
            lines.append("")
            lines.append(command.help)
        lines.append("")
        lines.append("DM: " + ("yes" if command.executable_in_dm else "no"))
        return "\n".join(lines)
