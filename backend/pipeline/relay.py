"""
Cargomon Output Relay.

Status banners and verbatim relay of captured process output.
Requires Python 3.11+.
"""

from rich.console import Console

from utils.errors import CargomonError


class OutputRelay:
    """
    Prints pipeline progress to the terminal.

    Program stdout goes to the stdout console; build and run diagnostics
    go to the stderr console. Captured bytes bypass rich and are written
    unchanged to the console file, so control characters, tabs and
    non-UTF-8 output reach the terminal as the program produced them.
    """

    def __init__(
        self,
        color: bool = True,
        console: Console | None = None,
        error_console: Console | None = None,
    ) -> None:
        """
        Initialize the relay.

        Args:
            color: Whether banners are colorized
            console: Console for status and program stdout
            error_console: Console for captured stderr
        """
        self.console = console or Console(no_color=not color, highlight=False)
        self.error_console = error_console or Console(
            stderr=True, no_color=not color, highlight=False
        )

    def _status(self, message: str, style: str | None = None) -> None:
        self.console.print(message, style=style, markup=False, highlight=False)

    @staticmethod
    def _relay(console: Console, data: bytes) -> None:
        if not data:
            return
        stream = console.file
        stream.flush()
        buffer = getattr(stream, "buffer", None)
        if buffer is not None:
            buffer.write(data)
            if not data.endswith(b"\n"):
                buffer.write(b"\n")
            buffer.flush()
            return

        # Text-only file, no binary layer to write through
        text = data.decode("utf-8", errors="replace")
        stream.write(text if text.endswith("\n") else text + "\n")
        stream.flush()

    def watching(self) -> None:
        self._status("Watching for changes. Press Ctrl+C to exit.", style="bold cyan")

    def change_detected(self) -> None:
        self._status("Change detected. Rebuilding...", style="yellow")

    def build_succeeded(self) -> None:
        self._status("Build successful. Running the program...", style="green")

    def build_failed(self, stderr: bytes) -> None:
        self._status("Build failed. Error output:", style="bold red")
        self._relay(self.error_console, stderr)

    def run_succeeded(self, stdout: bytes) -> None:
        self._relay(self.console, stdout)
        self._status("Program executed successfully.", style="green")

    def run_failed(self, stderr: bytes) -> None:
        self._relay(self.error_console, stderr)
        self._status("Program execution failed.", style="bold red")

    def locate_failed(self, error: CargomonError) -> None:
        self._status(
            f"Build succeeded but the executable could not be located: {error}",
            style="bold red",
        )

    def spawn_failed(self, error: CargomonError) -> None:
        self.error_console.print(
            f"Environment error: {error}. Check that the tool is installed and executable.",
            style="bold white on red",
            markup=False,
            highlight=False,
        )

    def timed_out(self, error: CargomonError) -> None:
        self._status(f"Timed out: {error}", style="bold red")

    def watch_error(self, error: CargomonError) -> None:
        self._status(f"Watch error: {error}", style="red")

    def continuing(self) -> None:
        self._status("\nContinuing to watch for changes...", style="dim")

    def stopped(self) -> None:
        self._status("Stopped watching.", style="dim")
