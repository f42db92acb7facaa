#!/usr/bin/env python3
"""Simple CLI for trying the crypto research tools locally"""

import argparse
import asyncio
import json
import sys

from cryptoscope.core.agent.tools import ToolExecutor, ToolRegistry
from cryptoscope.logging_config import setup_logging
from cryptoscope.types import ToolCall


def print_tools(registry: ToolRegistry):
    """Pretty print the registered tools"""
    definitions = registry.get_definitions()
    print(f"\n🧰 {len(definitions)} tools available")
    print("=" * 50)
    for definition in definitions:
        params = ", ".join(
            f"{p.name}{'' if p.required else '?'}:{p.type.value}" for p in definition.parameters
        )
        print(f"{definition.name}({params})")
        print(f"    {definition.description[:100]}")


async def cli_call(name: str, raw_args: str) -> int:
    """CLI command to run a single tool"""
    try:
        arguments = json.loads(raw_args) if raw_args else {}
    except json.JSONDecodeError as e:
        print(f"❌ --args is not valid JSON: {e}")
        return 2
    if not isinstance(arguments, dict):
        print("❌ --args must be a JSON object")
        return 2

    executor = ToolExecutor(ToolRegistry())
    print(f"🔍 Running {name}...")
    result = await executor.execute_single(ToolCall(id="cli", name=name, arguments=arguments))

    if result.error:
        print(f"❌ {result.error_type}: {result.error}")
        return 1

    envelope = result.result
    print(json.dumps(envelope["data"], indent=2))
    print(f"\nData Sources: {', '.join(envelope['source_urls'])}")
    if envelope.get("warnings"):
        print(f"\n⚠️  Warnings: {'; '.join(envelope['warnings'])}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cryptoscope tools CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List available tools")

    call_parser = subparsers.add_parser("call", help="Run a tool")
    call_parser.add_argument("name", help="Tool name, e.g. get_global_crypto_data")
    call_parser.add_argument("--args", default="{}", help='Tool arguments as a JSON object, e.g. \'{"token_id": "bitcoin"}\'')

    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    return parser


async def main() -> int:
    args = build_parser().parse_args()
    setup_logging(args.log_level, stream=sys.stderr)

    if args.command == "list":
        print_tools(ToolRegistry())
        return 0
    return await cli_call(args.name, args.args)


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
