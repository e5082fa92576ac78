"""
Drill CLI - Command-line interface.

Usage:
    drill serve [--seed DIR]                    Run the API server
    drill practice [selector] --url URL --token T   Practice in the terminal
                                                (no selector: resume)

In practice mode:
    type the answer and press Enter
    ?   "I know this" (reveals the answer)
    y   confirm a revealed answer
    n   "I was wrong"
    q   quit (progress stays saved)
"""

import argparse
import logging
import sys
import time

from .config import DrillConfig, configure_logging

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Drill - Vocabulary practice sessions",
        prog="drill",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", type=int, help="Port")
    serve_parser.add_argument("--seed", help="Directory of <owner>/<unit>.csv files to load")

    # Practice command
    practice_parser = subparsers.add_parser("practice", help="Practice in the terminal")
    practice_parser.add_argument(
        "selector",
        nargs="?",
        help='Unit id, "1,2,3", or "all" (default: resume the unfinished session)',
    )
    practice_parser.add_argument("--url", default="http://127.0.0.1:8000", help="Server URL")
    practice_parser.add_argument("--token", required=True, help="Bearer token")

    args = parser.parse_args(argv)
    config = DrillConfig.from_env()
    configure_logging(config.log_level)

    if args.command == "serve":
        cmd_serve(args, config)
    elif args.command == "practice":
        cmd_practice(args, config)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_serve(args, config: DrillConfig):
    """Run the API server with uvicorn."""
    import uvicorn
    from .api.app import create_app, build_service
    from .words import load_directory

    service = build_service(config)
    if args.seed:
        units = load_directory(service.word_store, args.seed)
        print(f"Loaded {len(units)} unit(s) from {args.seed}")

    if not config.api_tokens:
        logger.warning("DRILL_API_TOKENS is empty - every request will be rejected")

    app = create_app(service=service, config=config)
    uvicorn.run(app, host=args.host or config.host, port=args.port or config.port)


def cmd_practice(args, config: DrillConfig):
    """Drive a session from the terminal."""
    from .errors import DrillError, NotFoundError
    from .engine_core.state import PracticeStatus
    from .engine_core.reducer import Reducer
    from .session.driver import PracticeDriver
    from .sync import HttpPracticeClient, SyncPoller

    client = HttpPracticeClient(args.url, token=args.token)
    driver = PracticeDriver(client, reducer=Reducer(feedback_delay=config.feedback_delay))

    selector = args.selector
    if selector is None:
        try:
            existing = client.get_session()
        except DrillError as e:
            print(f"Failed to fetch session: {e}")
            sys.exit(1)
        if existing is None:
            print("No active session. Pass a selector to start one.")
            sys.exit(1)
        selector = existing.list_selector
        print(
            f"You have an unfinished session ({selector}, "
            f"{existing.progress.done}/{existing.progress.total}). Continuing where you left off."
        )

    try:
        driver.start(selector)
    except NotFoundError:
        print("Nothing to practice: no words found.")
        sys.exit(1)
    except DrillError as e:
        print(f"Failed to start session: {e}")
        sys.exit(1)

    poller = SyncPoller(driver, interval=config.sync_interval)
    poller.start()

    try:
        while driver.is_active:
            state = driver.state
            if state.status == PracticeStatus.REVIEW_ERROR:
                # Input is locked until the feedback reverts
                time.sleep(max(0.0, state.revert_at - driver.clock()))
                driver.tick()
                continue
            driver.tick()
            state = driver.state

            word = state.current_word
            print(f"\n[{state.progress.done}/{state.progress.total}]  {word.source_text}")
            if state.status == PracticeStatus.REVIEWING:
                answer = input(f"  {state.revealed_answer}  - correct? [y/n] ").strip().lower()
                result = driver.confirm_correct() if answer == "y" else driver.mark_wrong()
            else:
                answer = input("  > ")
                if answer.strip().lower() == "q":
                    break
                if answer.strip() == "?":
                    result = driver.declare_known()
                else:
                    result = driver.submit(answer)

            if not result.success:
                continue
            for message in result.messages:
                print(f"  {message}")
    except (KeyboardInterrupt, EOFError):
        print()
    finally:
        poller.stop()
        client.close()

    if driver.state and driver.state.is_completed:
        print(f"Excellent! You've mastered all {driver.state.progress.total} words.")
    else:
        print("Progress saved. Run the same command to resume.")


if __name__ == "__main__":
    main()
