from rich.console import Console
from rich.markup import escape

# Initialize Rich console for colored output
console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_success(message: str = "Done"):
    """Print a success message"""
    console.print(f"[green]✓[/] {message}")


def print_error(message: str):
    """Print an error message"""
    err_console.print(f"[red]Error:[/] {escape(message)}", soft_wrap=True)


def print_child_line(line: str):
    """Echo one line of a package manager's output, dimmed"""
    console.print(f"[dim]---> {escape(line)}[/]", soft_wrap=True)
