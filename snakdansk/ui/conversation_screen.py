"""Terminal conversation screen with live level meter and spoken replies."""

import asyncio
import threading
import time
import logging
from concurrent.futures import Future
from typing import Optional, Tuple

from pubsub import pub
from rich.align import Align
from rich.console import Console, Group
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from ..models.conversation import Message, ProcessingState, Role, TurnPhase
from ..models.events import AUDIO_FRAME_TOPIC, TURN_ERROR_TOPIC, TURN_STATE_TOPIC, AudioEvent
from ..models.results import TurnResult, TurnStatus
from ..services.turn_orchestrator import TurnOrchestrator
from .keyboard_input import create_input_handler

logger = logging.getLogger(__name__)

HEADER_SIZE = 3
FOOTER_SIZE = 5

PHASE_LABELS = {
    TurnPhase.IDLE: ("⏹️  READY", "bold green"),
    TurnPhase.RECORDING: ("🔴 RECORDING", "bold red"),
    TurnPhase.TRANSCRIBING: ("📝 TRANSCRIBING", "bold yellow"),
    TurnPhase.THINKING: ("💭 THINKING", "bold yellow"),
    TurnPhase.SPEAKING: ("🔊 SPEAKING", "bold magenta"),
}


def level_bar(level: float, width: int = 30) -> str:
    filled = int(round(max(0.0, min(level, 1.0)) * width))
    return "█" * filled + "░" * (width - filled)


class ConversationScreen:
    """Rich Live interface around a TurnOrchestrator.

    The orchestrator's coroutines run on a private event loop thread; key
    presses schedule them there and the screen redraws from orchestrator
    state plus the events it publishes.
    """

    def __init__(self, orchestrator: TurnOrchestrator, topic_title: str,
                 console: Optional[Console] = None):
        self.orchestrator = orchestrator
        self.topic_title = topic_title
        self.console = console or Console()

        self.phase = TurnPhase.IDLE
        self.state = ProcessingState()
        self.last_error: Optional[TurnResult] = None
        self.notice = ""
        self.recorded_ms = 0

        self.loop = asyncio.new_event_loop()
        self.loop_thread: Optional[threading.Thread] = None
        self.pending: Optional[Future] = None
        self.running = False
        self.input_handler = None

    # pub/sub listeners
    def on_state(self, phase: TurnPhase, state: ProcessingState) -> None:
        self.phase = phase
        self.state = state

    def on_error(self, result: TurnResult) -> None:
        self.last_error = result

    def on_audio_frame(self, event: AudioEvent) -> None:
        # sequence numbers restart with every recording
        self.recorded_ms = event.sequence_number * (event.chunk_duration_ms or 0)

    def create_layout(self) -> Layout:
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=HEADER_SIZE),
            Layout(name="messages", ratio=1),
            Layout(name="footer", size=FOOTER_SIZE),
        )
        return layout

    def update_header(self, layout: Layout) -> None:
        label, style = PHASE_LABELS[self.phase]
        header = Text.assemble(
            ("🇩🇰 SnakDansk", "bold blue"), "  |  ",
            (f"Emne: {self.topic_title}", "cyan"), "  |  ",
            (label, style),
        )
        layout["header"].update(Panel(Align.center(header), style="bright_blue"))

    def messages_area(self) -> Tuple[int, int]:
        """Lines and columns available inside the messages panel."""
        width, height = self.console.size
        return max(1, height - HEADER_SIZE - FOOTER_SIZE - 2), max(10, width - 4)

    def render_message(self, message: Message) -> Text:
        if message.role == Role.USER:
            return Text(message.content, style="bold white on blue", justify="right")
        block = Text(message.content, style="white")
        if message.translation:
            block.append(f"\n{message.translation}", style="dim italic")
        return block

    def update_messages(self, layout: Layout) -> None:
        messages = list(self.orchestrator.messages)
        if not messages:
            body = Text("Tryk MELLEMRUM og sig noget på dansk. (Press SPACE and say something in Danish.)",
                        style="dim white italic")
            layout["messages"].update(Panel(body, title="💬 Samtale", border_style="blue"))
            return

        # newest messages stay in view, older ones scroll off the top
        height, width = self.messages_area()
        rendered = []
        used = 0
        for message in reversed(messages):
            block = self.render_message(message)
            lines = len(block.wrap(self.console, width)) + 1
            if rendered and used + lines > height:
                break
            rendered.append(Text(""))
            rendered.append(block)
            used += lines
        rendered.reverse()
        layout["messages"].update(Panel(Group(*rendered), title="💬 Samtale", border_style="blue"))

    def update_footer(self, layout: Layout) -> None:
        lines = []
        if self.orchestrator.is_recording:
            lines.append(Text.assemble(
                ("Level ", "bold"), (level_bar(self.orchestrator.audio_level), "green"),
                f"  {self.recorded_ms / 1000:.1f}s",
            ))
        elif self.state.transcribing or self.state.thinking:
            lines.append(Text("Processing...", style="yellow"))
        elif self.last_error is not None:
            hint = "  SPACE to try again" if self.last_error.retryable else ""
            lines.append(Text(f"⚠️  {self.last_error.error}{hint}", style="bold red"))
        elif self.notice:
            lines.append(Text(self.notice, style="yellow"))

        lines.append(Text.assemble(
            ("SPACE", "bold green"), " Record/Stop  ",
            ("R", "bold blue"), " Reset  ",
            ("C", "bold yellow"), " Clear speech cache  ",
            ("Q", "bold red"), " Quit",
        ))
        layout["footer"].update(Panel(Group(*lines), style="bright_black"))

    def update_display(self, layout: Layout) -> None:
        self.update_header(layout)
        self.update_messages(layout)
        self.update_footer(layout)

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def _on_toggle_done(self, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Turn crashed: {error}", exc_info=error)
            self.notice = f"Unexpected error: {error}"
            return
        result = future.result()
        if result.status == TurnStatus.REJECTED:
            self.notice = result.error
        elif result.status == TurnStatus.SKIPPED:
            self.notice = result.error
        elif result.ok:
            self.last_error = None

    def toggle_recording(self) -> None:
        self.notice = ""
        if self.orchestrator.is_recording or self.orchestrator.can_record():
            self.last_error = None
        self.pending = asyncio.run_coroutine_threadsafe(self.orchestrator.toggle_recording(), self.loop)
        self.pending.add_done_callback(self._on_toggle_done)

    def handle_key_input(self, key: str) -> bool:
        """Handle keyboard input. Returns True to continue, False to quit."""
        if key == 'q':
            self.running = False
            return False
        if key in (' ', '\r', '\n'):
            self.toggle_recording()
        elif key == 'r':
            if self.orchestrator.state.busy or self.orchestrator.is_recording:
                self.notice = "Finish the current turn before resetting"
            else:
                self.orchestrator.reset()
                self.last_error = None
                self.notice = "Session reset"
        elif key == 'c':
            self.orchestrator.bridge.clear_cache()
            self.notice = "Speech cache cleared"
        return True

    def run(self) -> None:
        """Run the conversation screen until the user quits."""
        pub.subscribe(self.on_state, TURN_STATE_TOPIC)
        pub.subscribe(self.on_error, TURN_ERROR_TOPIC)
        pub.subscribe(self.on_audio_frame, AUDIO_FRAME_TOPIC)
        self.loop_thread = threading.Thread(target=self._run_loop, daemon=True, name="TurnLoopThread")
        self.loop_thread.start()

        self.running = True
        layout = self.create_layout()
        self.input_handler = create_input_handler(self.handle_key_input)
        self.input_handler.start()
        try:
            with Live(layout, console=self.console, refresh_per_second=10, screen=True):
                while self.running:
                    self.update_display(layout)
                    time.sleep(0.1)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        self.running = False
        if self.input_handler:
            self.input_handler.stop()

        self.orchestrator.close()
        if self.pending is not None and not self.pending.done():
            self.pending.cancel()
        self.loop.call_soon_threadsafe(self.loop.stop)
        if self.loop_thread is not None:
            self.loop_thread.join(timeout=2.0)

        pub.unsubscribe(self.on_state, TURN_STATE_TOPIC)
        pub.unsubscribe(self.on_error, TURN_ERROR_TOPIC)
        pub.unsubscribe(self.on_audio_frame, AUDIO_FRAME_TOPIC)
        self.console.print("👋 Farvel! Session ended", style="bold blue")
        logger.info("ConversationScreen cleanup completed")
