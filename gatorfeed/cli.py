"""Command-line entry point."""

from __future__ import annotations

import sys

from . import config
from .commands import Command, Commands, State, middleware_logged_in
from .database import connect
from .handlers import (
    handle_add_feed,
    handle_agg,
    handle_browse,
    handle_feeds,
    handle_follow,
    handle_following,
    handle_login,
    handle_register,
    handle_reset,
    handle_unfollow,
    handle_users,
)

USAGE = "Usage: gatorfeed [login|register] <username>"


def build_commands() -> Commands:
    """Return the registry of every command the program offers."""
    commands = Commands()
    commands.register("login", handle_login, "Login")
    commands.register("register", handle_register, "Register user")
    commands.register("reset", handle_reset, "Reset database")
    commands.register("users", handle_users, "List users")
    commands.register("agg", handle_agg, "Aggregate feeds")
    commands.register("addfeed", middleware_logged_in(handle_add_feed), "Add feed to database")
    commands.register("feeds", handle_feeds, "List available feeds")
    commands.register("follow", middleware_logged_in(handle_follow), "Follow feed")
    commands.register("following", middleware_logged_in(handle_following),
                      "List user's following feeds")
    commands.register("unfollow", middleware_logged_in(handle_unfollow), "Unfollow feed")
    commands.register("browse", middleware_logged_in(handle_browse),
                      "Browse posts in following feed")
    return commands


def main(argv: list[str] | None = None) -> int:
    """Run one command; return the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        cfg = config.read()
        db = connect(cfg.db_url)
    except Exception as exc:
        print(exc, file=sys.stderr)
        return 1
    try:
        commands = build_commands()
        if not args:
            print(USAGE, file=sys.stderr)
            return 1
        if args[0] == "help":
            commands.help()
            return 0
        try:
            commands.run(State(db, cfg), Command(args[0], args[1:]))
        except KeyboardInterrupt:
            return 130
        except Exception as exc:
            print(exc, file=sys.stderr)
            return 1
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())