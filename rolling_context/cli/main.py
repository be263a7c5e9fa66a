"""CLI: rolling-context chat, init, presets, config validate."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

import yaml

from ..config import load_config, validate_config
from ..presets import get_preset, list_presets
from ..types import BudgetTooSmallError, LLMProviderError, OverflowPolicy, Strategy

EXIT_COMMANDS = {"exit", "quit", "close"}


def is_exit_command(line: str) -> bool:
    return line.strip().lower() in EXIT_COMMANDS


def run_repl(
    engine,
    read_line: Callable[[str], str] = input,
    write: Callable[[str], object] = sys.stdout.write,
    show_stats: bool = False,
) -> int:
    """Read lines until an exit command (or EOF), answering each one."""
    while True:
        try:
            line = read_line("You: ")
        except EOFError:
            write("\n")
            break

        if is_exit_command(line):
            break
        if not line.strip():
            continue

        write("AI:  ")
        try:
            engine.respond(line, on_chunk=write)
        except LLMProviderError as e:
            write("\n")
            print(f"Completion error: {e}", file=sys.stderr)
            continue
        except BudgetTooSmallError as e:
            write("\n")
            print(f"Budget error: {e}", file=sys.stderr)
            continue
        write("\n\n")

        if show_stats:
            s = engine.stats()
            print(
                f"[{s.strategy}] {s.turn_count} turns, {s.total_tokens}/{s.budget_tokens} tokens, "
                f"{s.topic_count} topics ({s.excerpt_count} excerpts), {s.pending_tasks} pending",
                file=sys.stderr,
            )
    return 0


def _load_replay_prompts(path: Path) -> list[str]:
    return [line for line in path.read_text().splitlines() if line.strip()]


def cmd_chat(args):
    """Interactive chat (or replay) through the context manager."""
    from ..engine import ConversationEngine
    from ..providers import OpenAICompatibleProvider

    config = load_config(args.config)
    if args.strategy:
        config.strategy = Strategy(args.strategy)
    if args.budget is not None:
        config.budget.max_tokens = args.budget
    if args.overflow_policy:
        config.budget.overflow_policy = OverflowPolicy(args.overflow_policy)
    if args.model:
        config.provider.model = args.model

    errors = validate_config(config)
    if errors:
        for err in errors:
            print(f"Config error: {err}", file=sys.stderr)
        sys.exit(1)

    try:
        provider = OpenAICompatibleProvider(config=config.provider, api_key=args.api_key)
    except LLMProviderError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    engine = ConversationEngine(provider, config=config)

    if args.replay:
        replay_path = Path(args.replay)
        if not replay_path.exists():
            print(f"Replay file not found: {replay_path}", file=sys.stderr)
            sys.exit(1)
        prompts = iter(_load_replay_prompts(replay_path))

        def read_line(prompt: str) -> str:
            try:
                line = next(prompts)
            except StopIteration:
                raise EOFError from None
            print(f"{prompt}{line}")
            return line
    else:
        read_line = input

    try:
        status = run_repl(engine, read_line=read_line, show_stats=args.verbose)
    finally:
        engine.close(cancel_pending=True)
    sys.exit(status)


def cmd_init(args):
    """Generate a config file from a preset."""
    preset = get_preset(args.preset)
    if preset is None:
        available = ", ".join(p.name for p in list_presets())
        print(f"Unknown preset: {args.preset}", file=sys.stderr)
        print(f"Available presets: {available}", file=sys.stderr)
        sys.exit(1)

    output = Path.cwd() / "rolling-context.yaml"
    if output.exists() and not args.force:
        print(f"Config file already exists: {output}", file=sys.stderr)
        print("Use --force to overwrite.", file=sys.stderr)
        sys.exit(1)

    output.write_text(preset.template)
    print(f"Created {output}")
    print(f"Preset: {preset.name}: {preset.description}")


def cmd_presets(args):
    """List or show presets."""
    action = getattr(args, "presets_action", None) or "list"

    if action == "list":
        print(f"{'Name':<12} {'Description'}")
        print("-" * 60)
        for p in list_presets():
            print(f"{p.name:<12} {p.description}")

    elif action == "show":
        preset = get_preset(args.preset_name)
        if preset is None:
            print(f"Unknown preset: {args.preset_name}", file=sys.stderr)
            sys.exit(1)
        print(yaml.safe_dump(preset.config_dict, sort_keys=False))


def cmd_config_validate(args):
    """Validate config file."""
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    errors = validate_config(config)
    if errors:
        print("Config validation errors:")
        for err in errors:
            print(f"  - {err}")
        sys.exit(1)
    else:
        print("Config is valid.")
        print(f"  Strategy: {config.strategy.value}")
        print(f"  Budget: {config.budget.max_tokens:,} tokens ({config.budget.overflow_policy.value})")
        print(f"  Token counter: {config.token_counter}")
        print(f"  Provider: {config.provider.base_url} ({config.provider.model})")


def main():
    parser = argparse.ArgumentParser(
        prog="rolling-context",
        description="Token-budgeted conversation memory for chat agents",
    )
    parser.add_argument("--config", "-c", help="Path to config file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging and per-turn stats")

    subparsers = parser.add_subparsers(dest="command")

    # chat
    chat_parser = subparsers.add_parser("chat", help="Interactive chat through the context manager")
    chat_parser.add_argument("--strategy", "-s", choices=[s.value for s in Strategy])
    chat_parser.add_argument("--budget", "-b", type=int, help="Token budget override")
    chat_parser.add_argument(
        "--overflow-policy", choices=[p.value for p in OverflowPolicy],
        help="What to do when one turn exceeds the budget",
    )
    chat_parser.add_argument("--model", help="Model name override")
    chat_parser.add_argument("--api-key", help="API key (or set OPEN_AI_KEY env var)")
    chat_parser.add_argument(
        "--replay",
        metavar="FILE",
        help="Replay prompts from a text file (one prompt per line)",
    )

    # init
    init_parser = subparsers.add_parser("init", help="Generate config from a preset")
    init_parser.add_argument("preset", help="Preset name (raw, summarized, retrieval)")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing config")

    # presets
    presets_parser = subparsers.add_parser("presets", help="List or inspect config presets")
    presets_sub = presets_parser.add_subparsers(dest="presets_action")
    presets_sub.add_parser("list", help="List all available presets")
    presets_show_parser = presets_sub.add_parser("show", help="Show a preset's config as YAML")
    presets_show_parser.add_argument("preset_name", help="Preset name to show")

    # config validate
    config_parser = subparsers.add_parser("config", help="Config operations")
    config_sub = config_parser.add_subparsers(dest="config_command")
    config_sub.add_parser("validate", help="Validate config file")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "chat":
        cmd_chat(args)
    elif args.command == "init":
        cmd_init(args)
    elif args.command == "presets":
        cmd_presets(args)
    elif args.command == "config":
        if args.config_command == "validate":
            cmd_config_validate(args)
        else:
            print("Usage: rolling-context config validate")
            sys.exit(1)


if __name__ == "__main__":
    main()
