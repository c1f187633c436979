"""Operator CLI for inspecting triggers, memory and search usage."""

import argparse
import asyncio
import uuid

from groq import AsyncGroq

from .config import WhimcraftConfig, load_config
from .context import ContextOrchestrator
from .keywords import KeywordDispatcher, build_default_registry
from .keywords.base import trigger_key
from .logging import configure_logger
from .memory import (
    FactExtractor,
    MemoryCategory,
    MemoryManager,
    MemoryStore,
    MemoryTier,
    cleanup_user_memory,
)
from .pipeline import ChatTurnPreparer
from .web_search import GoogleSearchService, SearchRateLimiter, SearchUsageStore


def _memory_manager(config: WhimcraftConfig) -> MemoryManager:
    """Open the memory store, with an extractor when a Groq key is set."""
    store = MemoryStore(config.memory_db_path)
    store.init_db()
    extractor = None
    if config.groq_api_key:
        extractor = FactExtractor(
            AsyncGroq(api_key=config.groq_api_key), model=config.extraction_model
        )
    return MemoryManager(store, extractor=extractor)


def _rate_limiter(config: WhimcraftConfig) -> SearchRateLimiter:
    store = SearchUsageStore(config.usage_db_path)
    store.init_db()
    return SearchRateLimiter(
        store,
        daily_limit=config.search.daily_limit,
        free_daily_limit=config.search.free_daily_limit,
        cost_per_search=config.search.cost_per_search,
    )


def cmd_check(args: argparse.Namespace) -> int:
    """Show which keyword triggers a message fires."""
    dispatcher = KeywordDispatcher(build_default_registry())
    results = dispatcher.check(args.message)

    print(f"\n{'Trigger':<32} {'Matched':<8} Keywords")
    print("-" * 72)
    for result in results:
        name = trigger_key(result.type)
        keywords = ", ".join(result.matched_keywords) or "-"
        print(f"{name:<32} {'yes' if result.matched else 'no':<8} {keywords}")
    print()
    return 0


def cmd_memory_list(args: argparse.Namespace) -> int:
    """List a user's facts."""
    manager = _memory_manager(load_config())
    try:
        memory = manager.get(args.user)
    finally:
        manager.store.close()

    if not memory.facts:
        print(f"No facts stored for {args.user}.")
        return 0

    print(f"\n{'Id':<38} {'Tier':<10} {'Category':<11} {'Conf':<5} Content")
    print("-" * 96)
    for fact in memory.facts:
        print(
            f"{fact.id:<38} {fact.tier.value:<10} {fact.category.value:<11} "
            f"{fact.confidence:<5.2f} {fact.content}"
        )
    print(f"\n{memory.stats.total_facts} facts, ~{memory.stats.token_usage} tokens")
    if memory.language_preference is not None:
        print(f"Language preference: {memory.language_preference.value}")
    return 0


def cmd_memory_remember(args: argparse.Namespace) -> int:
    """Store a fact stated by the user."""
    manager = _memory_manager(load_config())
    try:
        fact = manager.remember(
            args.user,
            args.content,
            MemoryCategory(args.category),
            MemoryTier(args.tier),
        )
    finally:
        manager.store.close()

    if fact is None:
        print("Already remembered (duplicate fact).")
        return 0
    print(f"✓ Remembered {fact.id}")
    return 0


def cmd_memory_forget(args: argparse.Namespace) -> int:
    """Delete one fact."""
    manager = _memory_manager(load_config())
    try:
        deleted = manager.delete_fact(args.user, args.fact_id)
    finally:
        manager.store.close()

    if not deleted:
        print(f"Error: No fact '{args.fact_id}' for {args.user}")
        return 1
    print(f"✓ Forgot {args.fact_id}")
    return 0


def cmd_memory_clear(args: argparse.Namespace) -> int:
    """Delete all of a user's facts."""
    manager = _memory_manager(load_config())
    try:
        manager.clear(args.user)
    finally:
        manager.store.close()
    print(f"✓ Cleared memory of {args.user}")
    return 0


def cmd_memory_cleanup(args: argparse.Namespace) -> int:
    """Remove expired facts and enforce tier limits."""
    manager = _memory_manager(load_config())
    try:
        users = [args.user] if args.user else manager.store.list_users()

        total = 0
        for user in users:
            removed = cleanup_user_memory(manager.store, user)
            total += removed
            print(f"{user}: removed {removed}")
    finally:
        manager.store.close()
    print(f"\n✓ Cleanup done, {total} facts removed")
    return 0


def cmd_search_stats(args: argparse.Namespace) -> int:
    """Show global search usage for the last 24 hours."""
    limiter = _rate_limiter(load_config())
    try:
        stats = asyncio.run(limiter.get_global_stats())
    finally:
        limiter.store.close()

    print(f"Searches (24h):  {stats.searches_today}")
    print(f"Remaining:       {stats.daily_remaining}")
    print(f"Estimated cost:  ${stats.total_cost / 100:.3f}")
    return 0


def cmd_context(args: argparse.Namespace) -> int:
    """Prepare the context a message would get, using keyword analysis."""
    config = load_config()
    events = configure_logger(config.log_dir)

    memory = _memory_manager(config)
    limiter = None
    try:
        dispatcher = KeywordDispatcher(build_default_registry(memory), event_logger=events)
        search = None
        if config.use_web_search:
            search = GoogleSearchService(config.google_api_key, config.google_engine_id)
            limiter = _rate_limiter(config)
            limiter.event_logger = events
        orchestrator = ContextOrchestrator(
            memory, search, limiter, config.models, event_logger=events
        )
        preparer = ChatTurnPreparer(dispatcher, orchestrator)

        conversation_id = args.conversation or f"cli-{uuid.uuid4().hex[:8]}"
        turn = asyncio.run(preparer.prepare(args.message, args.user, conversation_id))
    finally:
        memory.store.close()
        if limiter is not None:
            limiter.store.close()

    print(f"Model: {turn.context.model_name}")
    if turn.context.rate_limit_error:
        print(f"Rate limited: {turn.context.rate_limit_error}")
    for error in turn.errors:
        print(f"Trigger error: {error}")
    print()
    print(turn.context.context or "(empty context)")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="whimcraft",
        description="Inspect WhimCraft keyword triggers, memory and search usage",
    )
    subparsers = parser.add_subparsers(dest="command", help="Sub-command help")

    # keywords
    keywords_parser = subparsers.add_parser("keywords", help="Keyword triggers")
    keywords_sub = keywords_parser.add_subparsers(dest="subcommand")
    check_parser = keywords_sub.add_parser("check", help="Check a message against triggers")
    check_parser.add_argument("message", help="Message to check")
    check_parser.set_defaults(func=cmd_check)

    # memory
    memory_parser = subparsers.add_parser("memory", help="User memory")
    memory_sub = memory_parser.add_subparsers(dest="subcommand")

    list_parser = memory_sub.add_parser("list", help="List a user's facts")
    list_parser.add_argument("user", help="User id")
    list_parser.set_defaults(func=cmd_memory_list)

    remember_parser = memory_sub.add_parser("remember", help="Store a fact")
    remember_parser.add_argument("user", help="User id")
    remember_parser.add_argument("content", help="The fact")
    remember_parser.add_argument(
        "--category",
        choices=[c.value for c in MemoryCategory],
        default=MemoryCategory.PROFILE.value,
    )
    remember_parser.add_argument(
        "--tier",
        choices=[t.value for t in MemoryTier],
        default=MemoryTier.CORE.value,
    )
    remember_parser.set_defaults(func=cmd_memory_remember)

    forget_parser = memory_sub.add_parser("forget", help="Delete one fact")
    forget_parser.add_argument("user", help="User id")
    forget_parser.add_argument("fact_id", help="Fact id")
    forget_parser.set_defaults(func=cmd_memory_forget)

    clear_parser = memory_sub.add_parser("clear", help="Delete all of a user's facts")
    clear_parser.add_argument("user", help="User id")
    clear_parser.set_defaults(func=cmd_memory_clear)

    cleanup_parser = memory_sub.add_parser("cleanup", help="Expire and prune facts")
    cleanup_parser.add_argument("user", nargs="?", help="User id (all users if omitted)")
    cleanup_parser.set_defaults(func=cmd_memory_cleanup)

    # search
    search_parser = subparsers.add_parser("search", help="Web search usage")
    search_sub = search_parser.add_subparsers(dest="subcommand")
    stats_parser = search_sub.add_parser("stats", help="Global usage for the last 24 hours")
    stats_parser.set_defaults(func=cmd_search_stats)

    # context
    context_parser = subparsers.add_parser("context", help="Prepare context for a message")
    context_parser.add_argument("user", help="User id")
    context_parser.add_argument("message", help="The user message")
    context_parser.add_argument("--conversation", help="Conversation id")
    context_parser.set_defaults(func=cmd_context)

    return parser


def run_cli(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv: Command-line arguments (uses sys.argv if None).

    Returns:
        Exit code (0 for success).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    return args.func(args)
