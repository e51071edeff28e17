"""
CLI interface for the chat client.

One-shot mode:
    $ ag "explain SSE"                       # no memory
    $ git diff | ag -v r1 "review this"      # piped text is prepended
    $ ag -m new "let's plan a trip"          # start a saved conversation
    $ ag -m "and the second day?"            # continue it

Interactive mode starts when no query is given on a terminal.

Exit Codes:
    0: Success
    1: Configuration, API or network error, or missing query
    130: Interrupted with Ctrl+C
"""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

import requests
from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.styles import Style

from .chat_client import ChatClient
from .config import ChatConfig, ConfigError, read_config, resolve_api_key, set_config
from .connection_manager import ApiError
from .ui_manager import UIManager

logger = logging.getLogger(__name__)

MEMORY_ACTIONS = ('new', 'continue')


def setup_logging(debug: bool) -> None:
    """Send debug logs to llm_debug.log when --debug is given."""
    if debug:
        logging.basicConfig(
            filename='llm_debug.log',
            level=logging.DEBUG,
            format='%(asctime)s - %(levelname)s - %(message)s',
            filemode='w'
        )
        # Keep urllib3 connection chatter out of the log
        logging.getLogger('urllib3').setLevel(logging.INFO)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ag',
        description="Multi-turn chat with the DeepSeek API, with optional saved history",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        'query',
        nargs='*',
        help="Query text; a leading 'new' or 'continue' selects the memory action"
    )
    parser.add_argument(
        '-v', '--version',
        default='v3',
        help="Model version, r1 selects deepseek-reasoner"
    )
    parser.add_argument(
        '-t', '--temperature',
        type=float,
        default=1.0,
        help='Sampling temperature'
    )
    parser.add_argument(
        '-m', '--memory',
        action='store_true',
        help='Memory mode: load and save conversation history'
    )
    parser.add_argument(
        '--max-tokens',
        type=int,
        default=2048,
        help='Maximum tokens to generate'
    )
    parser.add_argument(
        '--base-url',
        help='API base URL (default: stored config or https://api.deepseek.com)'
    )
    parser.add_argument(
        '--set-key',
        metavar='KEY',
        help='Store the API key in the config file and exit'
    )
    parser.add_argument(
        '--no-typing',
        action='store_true',
        help='Print replies without the typing delay'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Write debug logs to llm_debug.log'
    )
    return parser


def split_action(words: List[str]) -> Tuple[Optional[str], str]:
    """Separate a leading memory action word from the query text."""
    if words and words[0] in MEMORY_ACTIONS:
        return words[0], " ".join(words[1:]).strip()
    return None, " ".join(words).strip()


def read_piped_input(stdin) -> str:
    if stdin is None or stdin.isatty():
        return ""
    return stdin.read()


def build_query(piped: str, query: str) -> str:
    """Prepend piped text to the query when there is any."""
    piped = piped.strip()
    if not piped:
        return query
    return f"{piped}\n{query}"


def create_prompt_session():
    """Create a prompt session with history and styling, or None."""
    try:
        style = Style.from_dict({
            'prompt': 'bold cyan',
        })
        return PromptSession(
            history=InMemoryHistory(),
            style=style,
            message=[('class:prompt', 'You: ')]
        )
    except Exception as e:
        # No usable terminal (e.g. redirected output); fall back to input()
        logger.debug(f"prompt_toolkit unavailable: {e}")
        return None


def run_once(client: ChatClient, ui: UIManager, query: str) -> int:
    try:
        client.chat(query)
    except ApiError as e:
        ui.show_error(f"API returned an error: {e.body}")
        return 1
    except requests.exceptions.RequestException as e:
        ui.show_error(f"Network error: {e}")
        return 1

    print()
    client.save_history()
    ui.show_memory_notice()
    return 0


def run_interactive(client: ChatClient, ui: UIManager) -> int:
    """REPL loop: each message is one request/response cycle."""
    ui.show_welcome()
    session = create_prompt_session()

    while True:
        try:
            if session:
                user_input = session.prompt().strip()
            else:
                user_input = input("You: ").strip()

            if not user_input:
                continue

            if user_input.startswith('/'):
                cmd = user_input[1:].lower()

                if cmd in ['quit', 'exit', 'q']:
                    ui.console.print("[yellow]👋 Goodbye![/yellow]")
                    break
                elif cmd == 'help':
                    ui.show_help()
                elif cmd == 'clear':
                    client.clear_history()
                elif cmd == 'history':
                    client.show_history()
                else:
                    ui.show_error(f"Unknown command: {user_input}")
                continue

            try:
                client.chat(user_input)
            except ApiError as e:
                ui.show_error(f"API returned an error: {e.body}")
                continue
            except requests.exceptions.RequestException as e:
                ui.show_error(f"Network error: {e}")
                continue

            print()
            client.save_history()

        except KeyboardInterrupt:
            ui.console.print("\n[yellow]👋 Goodbye![/yellow]")
            break
        except EOFError:
            break

    if client.config.memory:
        ui.show_memory_notice()
    return 0


def run(argv: Optional[List[str]] = None, stdin=None) -> int:
    """Parse arguments and run one-shot or interactive mode."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)

    stdin = stdin if stdin is not None else sys.stdin
    args.action, query = split_action(args.query)
    config = ChatConfig.from_args(args)
    ui = UIManager(config)

    # ========================================================================
    # Credentials
    # ========================================================================
    try:
        if args.set_key is not None:
            path = set_config(args.set_key)
            ui.show_success(f"Config file updated: {path}")
            return 0
        stored = read_config()
    except ConfigError as e:
        ui.show_error(str(e))
        return 1

    api_key = resolve_api_key(stored)
    if not api_key:
        ui.show_error("No API key configured. Run `ag --set-key KEY` or set DEEPSEEK_API_KEY.")
        return 1
    if stored is not None and stored.base_url and not args.base_url:
        config.base_url = stored.base_url.rstrip('/')

    # ========================================================================
    # Query Assembly
    # ========================================================================
    interactive = not query and stdin.isatty()
    if not query and not interactive:
        ui.show_error("Please provide a query")
        return 1
    final_query = "" if interactive else build_query(read_piped_input(stdin), query)

    client = ChatClient(config, api_key)
    try:
        if interactive:
            return run_interactive(client, ui)
        return run_once(client, ui, final_query)
    except KeyboardInterrupt:
        print()
        return 130
    finally:
        client.close()


def main():
    """Console entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
