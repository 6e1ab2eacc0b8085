"""CLI parser construction for the todo sync client."""

import argparse
from typing import Any


def build_parser(commands: Any) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="todo",
        description="todo: offline-first task list with a local cache and remote sync",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command")

    lp = sub.add_parser("list", help="List tasks (remote when online, cache otherwise)")
    lp.add_argument("--pending", action="store_true", help="only tasks waiting for sync")
    lp.set_defaults(func=commands.cmd_list)

    sp = sub.add_parser("show", help="Show a cached task")
    sp.add_argument("task_id")
    sp.set_defaults(func=commands.cmd_show)

    ap = sub.add_parser("add", help="Create a task")
    ap.add_argument("title")
    ap.add_argument("--description", "-d", default="")
    ap.add_argument("--attach", metavar="PATH", help="document to attach")
    ap.set_defaults(func=commands.cmd_add)

    up = sub.add_parser("update", help="Edit a task")
    up.add_argument("task_id")
    up.add_argument("--title")
    up.add_argument("--description", "-d")
    done = up.add_mutually_exclusive_group()
    done.add_argument("--done", dest="completed", action="store_true", default=None)
    done.add_argument("--undone", dest="completed", action="store_false", default=None)
    up.add_argument("--attach", metavar="PATH", help="document to attach")
    up.set_defaults(func=commands.cmd_update)

    dp = sub.add_parser("delete", help="Delete a task")
    dp.add_argument("task_id")
    dp.set_defaults(func=commands.cmd_delete)

    syp = sub.add_parser("sync", help="Push pending offline changes now")
    syp.set_defaults(func=commands.cmd_sync)

    stp = sub.add_parser("status", help="Connectivity, pending changes, last sync, stats")
    stp.set_defaults(func=commands.cmd_status)

    cp = sub.add_parser("clear-cache", help="Remove locally cached tasks of the current user")
    cp.set_defaults(func=commands.cmd_clear_cache)

    lg = sub.add_parser("login", help="Store user id and API token")
    lg.add_argument("--user", required=True)
    lg.add_argument("--token", default="")
    lg.set_defaults(func=commands.cmd_login)

    lo = sub.add_parser("logout", help="Forget user id and API token")
    lo.set_defaults(func=commands.cmd_logout)

    asp = sub.add_parser("autosync", help="Enable/disable sync on reconnect")
    asp.add_argument("state", choices=["on", "off"])
    asp.set_defaults(func=commands.cmd_autosync)

    wp = sub.add_parser("watch", help="Watch connectivity and sync on reconnect (Ctrl-C to stop)")
    wp.set_defaults(func=commands.cmd_watch)

    return parser
