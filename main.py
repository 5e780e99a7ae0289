"""Crow's Treasure — launcher. Runs the terminal session, or the relay with --relay."""

import argparse
import asyncio
import logging
from pathlib import Path

from crow_treasure.config import load_settings

RELAY_HOST = "0.0.0.0"
RELAY_PORT = 13015


def main():
    parser = argparse.ArgumentParser(description="Crow's Treasure launcher")
    parser.add_argument("--data-dir", type=Path, default=None,
                        help="Data storage directory (default: ./data)")
    parser.add_argument("--relay", action="store_true",
                        help="Serve the chat-completion relay instead of the session")
    parser.add_argument("--port", type=int, default=RELAY_PORT,
                        help=f"Relay port (default: {RELAY_PORT})")
    args = parser.parse_args()

    settings = load_settings()
    if args.data_dir:
        settings = settings.model_copy(update={"data_dir": args.data_dir})

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.relay:
        import uvicorn
        print(f"Starting relay on http://localhost:{args.port}/api/deepseek ...")
        uvicorn.run("crow_treasure.relay:create_app", factory=True,
                    host=RELAY_HOST, port=args.port)
        return

    from crow_treasure.cli import TerminalApp
    from crow_treasure.generator import TreasureGenerator
    from crow_treasure.llm import HttpRelay
    from crow_treasure.session import Session
    from crow_treasure.storage import TreasureStore

    store = TreasureStore(settings.data_dir)
    relay = HttpRelay(settings.relay_url, settings.relay_api_key, settings.relay_timeout)
    generator = TreasureGenerator(relay, model=settings.model, temperature=settings.temperature)
    session = Session(store, generator, draw_delay=settings.draw_delay)

    try:
        asyncio.run(TerminalApp(session).run())
    except KeyboardInterrupt:
        print("\nShutting down...")


if __name__ == "__main__":
    main()
