"""Sub-command handlers. Each returns a process exit code."""

import argparse
import time

import config
import todo_sync
from application.sync_engine import OfflineError, SyncEngine, SyncFailedError
from core.validation import TaskValidationError, validate_title

from .cli_io import structured_error, structured_response


def get_engine() -> SyncEngine:
    return todo_sync.build_engine()


def _require_user(command: str):
    user_id = config.get_user_id()
    if not user_id:
        structured_error(command, "Not logged in (run: todo login --user <id>)")
        return None
    return user_id


def cmd_list(args: argparse.Namespace) -> int:
    user_id = _require_user("list")
    if not user_id:
        return 1
    engine = get_engine()
    tasks = engine.list_tasks(user_id)
    if args.pending:
        tasks = [t for t in tasks if t.pending_sync]
    return structured_response(
        "list",
        message=f"{len(tasks)} task(s)",
        payload={"online": engine.is_online(), "tasks": tasks},
    )


def cmd_show(args: argparse.Namespace) -> int:
    try:
        task = get_engine().get_task_by_id(args.task_id)
    except ValueError as exc:
        return structured_error("show", str(exc))
    if task is None:
        return structured_error("show", f"Task {args.task_id} not found")
    return structured_response("show", payload={"task": task})


def cmd_add(args: argparse.Namespace) -> int:
    user_id = _require_user("add")
    if not user_id:
        return 1
    try:
        title = validate_title(args.title)
    except TaskValidationError as exc:
        return structured_error("add", str(exc))
    task = get_engine().add_task(user_id, title, document_uri=args.attach, description=args.description or "")
    message = "Task saved offline, will sync later" if task.pending_sync else "Task created"
    return structured_response("add", message=message, payload={"task": task})


def cmd_update(args: argparse.Namespace) -> int:
    updates = {}
    if args.title is not None:
        try:
            updates["title"] = validate_title(args.title)
        except TaskValidationError as exc:
            return structured_error("update", str(exc))
    if args.description is not None:
        updates["description"] = args.description
    if args.completed is not None:
        updates["completed"] = args.completed
    if not updates and not args.attach:
        return structured_error("update", "Nothing to update")
    engine = get_engine()
    try:
        engine.update_task(args.task_id, updates, document_uri=args.attach)
        task = engine.get_task_by_id(args.task_id)
    except ValueError as exc:
        return structured_error("update", str(exc))
    if task is None:
        return structured_error("update", f"Task {args.task_id} not found")
    return structured_response("update", message="Task updated", payload={"task": task})


def cmd_delete(args: argparse.Namespace) -> int:
    try:
        remaining = get_engine().delete_task(args.task_id)
    except ValueError as exc:
        return structured_error("delete", str(exc))
    return structured_response("delete", message="Task deleted", payload={"remaining": len(remaining)})


def cmd_sync(args: argparse.Namespace) -> int:
    user_id = _require_user("sync")
    if not user_id:
        return 1
    try:
        report = get_engine().sync_now(user_id)
    except OfflineError as exc:
        return structured_error("sync", str(exc), status="OFFLINE")
    except SyncFailedError as exc:
        return structured_error("sync", str(exc), payload={"report": exc.report})
    return structured_response("sync", message="Your tasks have been synced", payload={"report": report})


def cmd_status(args: argparse.Namespace) -> int:
    user_id = config.get_user_id() or None
    engine = get_engine()
    payload = {
        "user": user_id,
        "online": engine.is_online(),
        "auto_sync": config.get_auto_sync(),
        "pending": engine.pending_count(user_id),
        "last_sync": engine.last_sync(user_id),
        "stats": engine.stats(user_id),
    }
    return structured_response("status", payload=payload)


def cmd_clear_cache(args: argparse.Namespace) -> int:
    user_id = _require_user("clear-cache")
    if not user_id:
        return 1
    get_engine().clear_local_data(user_id)
    return structured_response("clear-cache", message="Local data has been cleared")


def cmd_login(args: argparse.Namespace) -> int:
    config.set_user_id(args.user)
    if args.token:
        config.set_user_token(args.token)
    return structured_response("login", message="Logged in", payload={"user": args.user, "token": "***" if args.token else None})


def cmd_logout(args: argparse.Namespace) -> int:
    config.set_user_id("")
    config.set_user_token("")
    return structured_response("logout", message="Logged out")


def cmd_autosync(args: argparse.Namespace) -> int:
    enabled = args.state == "on"
    config.set_auto_sync(enabled)
    return structured_response("autosync", payload={"auto_sync": enabled})


def cmd_watch(args: argparse.Namespace) -> int:  # pragma: no cover - long-running loop
    engine = get_engine()
    auto, watcher = todo_sync.build_auto_sync(engine)
    watcher.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
        auto.detach()
    return 0
