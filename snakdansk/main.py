"""Main application entry point for SnakDansk."""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from snakdansk import __version__
from snakdansk.models.topics import TOPICS, get_topic
from snakdansk.services.conversation_service import ConversationService
from snakdansk.ui.conversation_screen import ConversationScreen
from snakdansk.utils.debug import configure_debug
from snakdansk.web.app import create_app, run_server

from .config import SnakDanskConfig

logger = logging.getLogger(__name__)


class Application:

    def __init__(self, config_path: Optional[str], log_level: Optional[str] = None, debug: bool = False):
        self.config = SnakDanskConfig(config_path)
        if debug:
            self.config.set('debug', True)
        setup_logging(self.config, log_level or self.config.get('logging.level', 'INFO'))
        configure_debug(self.config.is_debug_enabled())
        self.service = ConversationService(self.config)

    def chat(self, topic_id: str, remote_url: Optional[str] = None) -> None:
        """Run the terminal conversation client."""
        topic = get_topic(topic_id)
        orchestrator = self.service.create_orchestrator(topic_id, remote_url=remote_url)
        try:
            ConversationScreen(orchestrator, topic.title).run()
        finally:
            self.service.shutdown()

    def serve(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """Run the HTTP API."""
        app = create_app(self.service.get_speech_bridge(), self.service.get_chat_adapter())
        run_server(
            app,
            host=host or self.config.get('server.host', '127.0.0.1'),
            port=port or self.config.get('server.port', 8080),
        )


def setup_logging(config: SnakDanskConfig, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get('logging.file_path', 'data/logs/snakdansk.log')
    console_output = config.get('logging.console_output', True)

    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    ))
    handlers.append(file_handler)

    # Console handler - warnings only, the terminal UI owns the screen
    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info("=" * 50)
    logger.info(f"SnakDansk {__version__} starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("=" * 50)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SnakDansk - spoken Danish conversation practice",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in defaults + environment)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose transcription/chat/speech diagnostics (same as DEBUG_MODE=true)"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"SnakDansk v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    chat_parser = subparsers.add_parser(
        "chat",
        help="Practice a spoken conversation in the terminal",
        epilog="Keys: SPACE=start/stop recording, r=reset session, c=clear speech cache, q=quit",
    )
    chat_parser.add_argument(
        "--topic",
        default="weather",
        choices=[topic.id for topic in TOPICS],
        help="Conversation topic (default: weather)"
    )
    chat_parser.add_argument(
        "--remote",
        metavar="URL",
        help="Chat through a running SnakDansk server instead of calling the model directly"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address (default: server.host)")
    serve_parser.add_argument("--port", type=int, help="Port (default: server.port)")

    subparsers.add_parser("topics", help="List conversation topics")
    return parser


def main(argv=None) -> None:
    """Main entry point for SnakDansk."""
    args = build_parser().parse_args(argv)

    if args.command == "topics":
        for topic in TOPICS:
            print(f"{topic.icon}  {topic.id:<16} {topic.title} ({topic.english_title})")
        return

    try:
        app = Application(args.config, args.log_level, args.debug)
        if args.command == "chat":
            app.chat(args.topic, remote_url=args.remote)
        elif args.command == "serve":
            app.serve(args.host, args.port)
    except KeyboardInterrupt:
        print("\n👋 Farvel!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
