"""
UI management for displaying messages and status.
"""

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import ChatConfig


class UIManager:
    """Manages user interface elements."""

    def __init__(self, config: ChatConfig):
        self.config = config
        self.console = Console()
        self.err_console = Console(stderr=True)

    def show_welcome(self):
        """Show welcome message with rich formatting."""
        welcome_text = Text()
        welcome_text.append("🤖 DeepSeek Chat", style="bold blue")
        welcome_text.append("\n\n", style="")
        welcome_text.append("Configuration:\n", style="bold")
        welcome_text.append(f"• Server: {self.config.base_url}\n", style="")
        welcome_text.append(f"• Model: {self.config.model}\n", style="")
        welcome_text.append(f"• Temperature: {self.config.temperature}\n", style="")
        welcome_text.append(f"• Max Tokens: {self.config.max_tokens}\n", style="")
        if self.config.memory:
            welcome_text.append(f"• Memory: {self.config.mem_action.value}\n", style="green")
        else:
            welcome_text.append("• Memory: Disabled\n", style="")

        welcome_text.append("\nCommands: /help, /clear, /history, /quit\n", style="dim")
        welcome_text.append("Type your message and press Enter to chat!", style="italic")

        self.console.print(Panel(welcome_text, title=":rocket: Welcome", border_style="blue"))

    def show_help(self):
        """Show help message."""
        help_table = Table(title="Available Commands")
        help_table.add_column("Command", style="cyan", no_wrap=True)
        help_table.add_column("Description", style="white")
        help_table.add_row("/help", "Show this help message")
        help_table.add_row("/clear", "Start a new conversation")
        help_table.add_row("/history", "Show conversation history")
        help_table.add_row("/quit", "Exit the chat")
        self.console.print(help_table)

    def show_memory_notice(self):
        """Tell the user whether this turn was saved."""
        if self.config.memory:
            self.console.print("[green]History saved; the next run continues this conversation.[/green]")
        else:
            self.console.print("[yellow]Memory mode is off; history was not saved.[/yellow]")

    def show_error(self, message: str):
        """Show error message."""
        self.err_console.print(f"[red]❌ {escape(message)}[/red]")

    def show_success(self, message: str):
        """Show success message."""
        self.console.print(f"[green]✓ {message}[/green]")
