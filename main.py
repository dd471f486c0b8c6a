#!/usr/bin/env python3
"""
main.py  —  memos-sync CLI
Usage:
  memos-sync                          # same as `status`
  memos-sync status                   # show settings (token masked)
  memos-sync sync                     # fetch memos + attachments
  memos-sync sync --limit 200 --dir notes/memos
  memos-sync config show              # print config/memos.yaml
  memos-sync config set api_url https://memos.example.com/api/v1
  memos-sync config set access_token_env MEMOS_TOKEN

Global flags:
  --settings PATH   settings file (default: config/memos.yaml)
  --log-level LVL   DEBUG/INFO/WARNING/ERROR (log file level)
  --json-logs       JSON lines in .logs/memos-sync.log
"""

import argparse
import sys

from cli import dispatch_command
from core.logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="memos-sync")
    parser.add_argument("--settings", default=None, help="Settings file path")
    parser.add_argument("--log-level", default="INFO", help="Log file level")
    parser.add_argument("--json-logs", action="store_true", help="JSON log format")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("status", help="Show settings")

    p_sync = sub.add_parser("sync", help="Fetch memos and attachments")
    p_sync.add_argument("--limit", type=int, default=None, help="Override sync_limit")
    p_sync.add_argument("--dir", default=None, help="Override sync_directory")

    p_cfg = sub.add_parser("config", help="Show or change settings")
    cfg_sub = p_cfg.add_subparsers(dest="config_action")
    cfg_sub.add_parser("show", help="Print settings")
    p_set = cfg_sub.add_parser("set", help="Set one setting")
    p_set.add_argument("key")
    p_set.add_argument("value")

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, structured=args.json_logs)
    return dispatch_command(args)


if __name__ == "__main__":
    sys.exit(main())
