#!/usr/bin/env python3
"""
Persistent JSON-line server for the tierlist builder.

Communicates via stdin/stdout. All debug output goes to the log file or
stderr; stdout is reserved for protocol lines.

Protocol:
    host -> Python (stdin):  {"id":"req_1","command":"generate","data":{...}}\n
    Python -> host (stdout): {"id":"req_1","success":true,"result":{...}}\n

Commands:
    generate         - Build weapon/armor tierlists from items + recipes
    validate_config  - Report malformed overrides and tag entries
    ping             - Health check
    shutdown         - Graceful exit

One-shot mode:
    tierlist-builder --input request.json [--config config.json]
"""

import argparse
import contextlib
import json
import os
import sys
import traceback
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from tierlist_builder import __version__
from tierlist_builder.config import load_config, merge_configs
from tierlist_builder.core import log as log_module
from tierlist_builder.core.log import log
from tierlist_builder.errors import ConfigError
from tierlist_builder.generator import generate_from_data
from tierlist_builder.tags import TagEntry
from tierlist_builder.tier_assigner import parse_override

# Command registry: handlers take (data, config) and return a JSON-ready dict
COMMAND_HANDLERS: Dict[str, Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]]] = {}


def register_command(name: str, handler: Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]]) -> None:
    """Register a command handler."""
    COMMAND_HANDLERS[name] = handler


def send_response(request_id, success, result=None, error=None, out=None):
    """Write one JSON-line response."""
    msg = {"id": request_id, "success": success}
    if result is not None:
        msg["result"] = result
    if error is not None:
        msg["error"] = error
    out = out or sys.stdout
    out.write(json.dumps(msg, ensure_ascii=False) + "\n")
    out.flush()


def handle_generate(data: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    return generate_from_data(data, config)


def handle_validate_config(data: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    """Check override strings and tag entries without generating anything."""
    cfg = load_config(config)
    problems = []
    for field_name in ('weapon_tier_overrides', 'armor_tier_overrides'):
        for entry in getattr(cfg, field_name):
            try:
                parse_override(entry)
            except ConfigError as e:
                problems.append({'field': field_name, 'entry': entry, 'error': str(e)})
    for entry in cfg.tags:
        try:
            TagEntry.from_list(entry)
        except ConfigError as e:
            problems.append({'field': 'tags', 'entry': entry, 'error': str(e)})
    return {'valid': not problems, 'problems': problems, 'config': cfg.to_dict()}


register_command('generate', handle_generate)
register_command('validate_config', handle_validate_config)


def dispatch(command: str, data: Dict[str, Any]) -> Dict[str, Any]:
    """Run a registered command with stray prints sent to stderr."""
    handler = COMMAND_HANDLERS[command]
    config = data.get("config", {})
    start = datetime.now()
    with contextlib.redirect_stdout(sys.stderr):
        result = handler(data, config)
    elapsed = (datetime.now() - start).total_seconds()
    log(f"{command} completed in {elapsed:.2f}s")
    return result


def serve(input_source, output) -> None:
    """Main loop: read JSON-line commands until EOF or shutdown."""
    send_response("__ready__", True, {
        "pid": os.getpid(),
        "version": __version__,
        "commands": sorted(COMMAND_HANDLERS) + ["ping", "shutdown"],
        "log_file": str(log_module.LOG_FILE),
    }, out=output)

    for line in input_source:
        line = line.strip()
        if not line:
            continue

        request_id = None
        try:
            msg = json.loads(line)
            request_id = msg.get("id", "unknown")
            command = msg.get("command", "")
            data = msg.get("data", {})

            log(f"Received command: {command} (id: {request_id})")

            if command == "shutdown":
                log("Shutdown requested")
                send_response(request_id, True, {"status": "shutting_down"}, out=output)
                break
            elif command == "ping":
                send_response(request_id, True, {"status": "alive", "pid": os.getpid()}, out=output)
            elif command in COMMAND_HANDLERS:
                send_response(request_id, True, dispatch(command, data), out=output)
            else:
                send_response(request_id, False, error=f"Unknown command: {command}", out=output)

        except json.JSONDecodeError as e:
            log(f"Invalid JSON: {e}, line: {line[:200]}")
            send_response(request_id or "unknown", False, error=f"Invalid JSON: {e}", out=output)
        except Exception as e:
            error_detail = f"{type(e).__name__}: {e}"
            log(f"Error handling command: {error_detail}\n{traceback.format_exc()}")
            send_response(request_id or "unknown", False, error=error_detail, out=output)

    log("Server exiting")


def run_once(input_path: str, config_path: Optional[str] = None) -> int:
    """Generate from a request file and print the result JSON.

    A --config file is layered over any config embedded in the request.
    """
    with open(input_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if config_path:
        with open(config_path, 'r', encoding='utf-8') as f:
            data["config"] = merge_configs(data.get("config") or {}, json.load(f))
    result = dispatch('generate', data)
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0 if result['validation']['all_valid'] else 1


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Tierlist builder server')
    parser.add_argument('--input', help='Generate once from a request JSON file and exit')
    parser.add_argument('--config', help='Config JSON file (one-shot mode)')
    parser.add_argument('--log-file', help='Log file path')
    args = parser.parse_args(argv)

    if args.log_file:
        log_module.set_log_file(args.log_file)

    log(f"=== Tierlist builder {__version__} - {datetime.now().isoformat()} ===")
    log(f"PID: {os.getpid()} Python: {sys.version.split()[0]}")

    if args.input:
        return run_once(args.input, args.config)

    serve(sys.stdin, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
