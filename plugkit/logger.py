"""Console logger handed to plugin handlers."""

from __future__ import annotations

from typing import Any

from rich.console import Console


class ConsoleLogger:
    """
    Minimal logging facade over a rich Console.

    Handlers call log/info/warn/error/debug with arbitrary objects, the way
    they would print. Output goes to stderr so handler results on stdout stay
    clean. Markup is off: handler output is data, not rich markup.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console(stderr=True)

    def _prepare(self, args: tuple[Any, ...]) -> list[Any]:
        return list(args)

    def _emit(self, args: tuple[Any, ...], style: str | None = None) -> None:
        self.console.print(*self._prepare(args), style=style, markup=False, highlight=False)

    def log(self, *args: Any) -> None:
        self._emit(args)

    def info(self, *args: Any) -> None:
        self._emit(args)

    def warn(self, *args: Any) -> None:
        self._emit(args, style="yellow")

    def error(self, *args: Any) -> None:
        self._emit(args, style="red")

    def debug(self, *args: Any) -> None:
        self._emit(args, style="dim")

    warning = warn
    print = log
