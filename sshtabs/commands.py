from __future__ import annotations

import inspect
from typing import Any, Callable


class CommandRegistry:
    """Maps action names to handlers; built once at startup and handed to the UI."""

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[..., Any]] = {}

    def register(self, name: str, handler: Callable[..., Any]) -> None:
        if name in self._handlers:
            raise ValueError(f"command already registered: {name}")
        self._handlers[name] = handler

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def names(self) -> list[str]:
        return sorted(self._handlers)

    async def dispatch(self, name: str, *args: Any, **kwargs: Any) -> Any:
        try:
            handler = self._handlers[name]
        except KeyError:
            raise KeyError(f"unknown command: {name}") from None
        result = handler(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result
