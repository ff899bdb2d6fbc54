"""Command-line entry point for the document Q&A client."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from backend_api import ResilientClient, client_session
from config import Settings, load_settings
from errors import ClientError
from logging_config import setup_logging
from views import chat_view, documents_view, upload_view


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(prog="docqa", description="Chat with your documents.")
    parser.add_argument("--api-url", help="Backend base URL (overrides DOCQA_API_URL)")
    parser.add_argument("--timeout", type=float, help="Per-request timeout in seconds")
    parser.add_argument("--retries", type=int, help="Retries for failed requests")
    parser.add_argument("--debug", action="store_true")
    commands = parser.add_subparsers(dest="command", required=True)

    chat = commands.add_parser("chat", help="Ask a question (interactive without MESSAGE)")
    chat.add_argument("message", nargs="?")
    chat.add_argument("--conversation-id")

    upload = commands.add_parser("upload", help="Upload documents")
    upload.add_argument("paths", nargs="+", type=Path)

    commands.add_parser("documents", help="Show stored documents and statistics")

    delete = commands.add_parser("delete", help="Delete a document")
    delete.add_argument("doc_id")

    commands.add_parser("health", help="Check backend availability")
    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.api_url is not None:
        overrides["api_url"] = args.api_url
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    if args.retries is not None:
        overrides["max_retries"] = args.retries
    if args.debug:
        overrides["debug"] = True
    return overrides


def _interactive_messages():
    while True:
        try:
            line = input("> ")
        except EOFError:
            return
        if line.strip() in {"exit", "quit"}:
            return
        yield line


async def run_command(args: argparse.Namespace, api: ResilientClient) -> int:
    """Dispatch a parsed command against the facade; returns the exit status."""
    out, err = sys.stdout, sys.stderr
    if args.command == "chat":
        messages = [args.message] if args.message else _interactive_messages()
        failures = await chat_view(api, messages, out, err, conversation_id=args.conversation_id)
        return 1 if failures else 0
    if args.command == "upload":
        return 1 if await upload_view(api, args.paths, out, err) else 0
    if args.command == "documents":
        return await documents_view(api, out, err)
    try:
        if args.command == "delete":
            await api.delete_document(args.doc_id)
            out.write(f"Deleted {args.doc_id}\n")
        else:
            health = await api.health_check()
            out.write(f"Backend status: {health.status}\n")
    except ClientError as exc:
        err.write(f"Error: {exc.message}\n")
        return 1
    return 0


async def _main(args: argparse.Namespace, settings: Settings) -> int:
    async with client_session(settings) as api:
        return await run_command(args, api)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the document Q&A client."""
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(**_overrides(args))
    except ValueError as exc:
        sys.stderr.write(f"Error: invalid configuration: {exc}\n")
        return 2
    setup_logging(settings.debug)
    try:
        return asyncio.run(_main(args, settings))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
