"""CLI dispatcher — lazy-loads command modules on demand."""
from __future__ import annotations


def dispatch_command(args) -> int:
    """Route args.cmd to the memos command module; returns the exit code."""
    cmd = getattr(args, "cmd", None) or "status"
    settings_path = getattr(args, "settings", None)

    from cli.memos_cmd import cmd_memos

    if cmd == "sync":
        return cmd_memos("sync", limit=args.limit, directory=args.dir,
                         settings_path=settings_path)

    elif cmd == "config":
        return cmd_memos("config",
                         config_action=args.config_action or "show",
                         key=getattr(args, "key", "") or "",
                         value=getattr(args, "value", "") or "",
                         settings_path=settings_path)

    return cmd_memos(cmd, settings_path=settings_path)
