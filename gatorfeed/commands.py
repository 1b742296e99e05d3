"""Command registry, shared application state and the login middleware."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import Any, Callable

from .config import Config
from .database import Queries
from .models import User


class CommandError(Exception):
    """A command was unknown or was given the wrong arguments."""


@dataclass
class State:
    """What every command handler works with."""

    db: Queries
    cfg: Config


@dataclass
class Command:
    """A command name and the arguments that follow it."""

    name: str
    args: list[str] = field(default_factory=list)


Handler = Callable[[State, Command], Any]
UserHandler = Callable[[State, Command, User], Any]


class Commands:
    """Named command handlers with a one-line description each."""

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}
        self._descriptions: dict[str, str] = {}

    def register(self, name: str, handler: Handler, description: str) -> None:
        """Bind ``handler`` to ``name``, replacing any earlier binding."""
        self._handlers[name] = handler
        self._descriptions[name] = description

    def run(self, state: State, command: Command) -> Any:
        """Run the handler registered for ``command.name``."""
        handler = self._handlers.get(command.name)
        if handler is None:
            raise CommandError(f"Command '{command.name}' not registered")
        return handler(state, command)

    def help(self) -> None:
        """Print every command with its description."""
        for name, description in self._descriptions.items():
            print(f"{name}: {description}")


def middleware_logged_in(handler: UserHandler) -> Handler:
    """Wrap ``handler`` so that it receives the currently logged-in user."""

    @functools.wraps(handler)
    def wrapper(state: State, command: Command) -> Any:
        user = state.db.get_user(state.cfg.current_user_name)
        return handler(state, command, user)

    return wrapper