"""Cross-platform keyboard input handling for the terminal UI."""

import sys
import threading
import time
from typing import Optional, Callable
import logging

logger = logging.getLogger(__name__)


class KeyboardInputHandler:
    """Reads single raw keypresses on a background thread."""

    def __init__(self, callback: Callable[[str], bool]):
        """Initialize keyboard handler.

        Args:
            callback: Function that takes a key and returns True to continue, False to quit
        """
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.name = "KeyboardInputThread"
        self.thread.start()
        logger.info("Keyboard input handler started")

    def stop(self) -> None:
        self.running = False
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join(timeout=1.0)
        logger.info("Keyboard input handler stopped")

    def _input_loop(self) -> None:
        while self.running:
            try:
                key = self._get_key()
                if key:
                    logger.debug(f"Key detected: {key!r}")
                    if not self.callback(key):
                        logger.info("Callback returned False, ending input loop")
                        self.running = False
                        break
            except Exception as e:
                logger.error(f"Error in keyboard input loop: {e}", exc_info=True)
            time.sleep(0.05)

    def _get_key(self) -> Optional[str]:
        if sys.platform == "win32":
            return self._get_key_windows()
        return self._get_key_unix()

    def _get_key_windows(self) -> Optional[str]:
        import msvcrt
        if msvcrt.kbhit():
            return msvcrt.getch().decode('utf-8', errors='ignore').lower()
        return None

    def _get_key_unix(self) -> Optional[str]:
        import select
        import termios
        import tty

        if not select.select([sys.stdin], [], [], 0.1)[0]:
            return None
        old_settings = termios.tcgetattr(sys.stdin)
        try:
            tty.setraw(sys.stdin.fileno())
            return sys.stdin.read(1).lower()
        finally:
            termios.tcsetattr(sys.stdin, termios.TCSADRAIN, old_settings)


class SimpleInputHandler:
    """Line-based fallback for terminals without raw mode (pipes, IDE consoles)."""

    def __init__(self, callback: Callable[[str], bool]):
        self.callback = callback
        self.running = False
        self.thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self.running:
            return

        self.running = True
        self.thread = threading.Thread(target=self._input_loop, daemon=True)
        self.thread.start()
        logger.info("Simple input handler started")

    def stop(self) -> None:
        self.running = False
        logger.info("Simple input handler stopped")

    def _input_loop(self) -> None:
        while self.running:
            try:
                user_input = input("> ").strip().lower()
            except (EOFError, KeyboardInterrupt):
                self.callback('q')
                break
            # empty line is the same as space: toggle recording
            key = user_input[0] if user_input else " "
            try:
                if not self.callback(key):
                    self.running = False
                    break
            except Exception as e:
                logger.error(f"Error handling input {key!r}: {e}", exc_info=True)


def create_input_handler(callback: Callable[[str], bool]):
    """Create the best available input handler for the current terminal."""
    if sys.platform != "win32" and not sys.stdin.isatty():
        logger.warning("stdin is not a terminal, using line-based input")
        return SimpleInputHandler(callback)
    return KeyboardInputHandler(callback)
