import os
import sys
from typing import TextIO

from splurt.model import Viewport

CSI = "\033["
RESET = f"{CSI}0m"


class TerminalError(RuntimeError):
    """The terminal cannot display the rendered image."""


def get_terminal_size() -> tuple[int, int]:
    """Return (columns, rows) of the terminal, or (80, 24) if not a tty."""
    if not sys.stdout.isatty():
        return (80, 24)
    size = os.get_terminal_size()
    return (size.columns, size.lines)


def supports_256_colours(env: dict[str, str] | None = None) -> bool:
    """Guess from the environment whether the terminal has the 256-colour palette."""
    if env is None:
        env = dict(os.environ)
    if env.get("COLORTERM", "").lower() in ("truecolor", "24bit"):
        return True
    term = env.get("TERM", "").lower()
    if not term or term == "dumb":
        return False
    return "256" in term or term.startswith(("xterm", "screen", "tmux", "kitty", "alacritty", "foot", "wezterm"))


def background(index: int) -> str:
    return f"{CSI}48;5;{index}m"


class Screen:
    """Full-screen, cursor-addressed drawing on an ANSI terminal.

    Cells are drawn as spaces with their background set to the palette colour.
    Output is buffered until ``flush()``.
    """

    def __init__(self, stream: TextIO | None = None, size: tuple[int, int] | None = None):
        self.stream = stream if stream is not None else sys.stdout
        self.size = size
        self._buffer: list[str] = []

    def __enter__(self) -> "Screen":
        # Alternate screen, hide cursor, clear
        self.stream.write(f"{CSI}?1049h{CSI}?25l{CSI}2J{CSI}H")
        self.stream.flush()
        return self

    def __exit__(self, *exc_info) -> None:
        self._buffer.clear()
        self.stream.write(f"{RESET}{CSI}?25h{CSI}?1049l")
        self.stream.flush()

    def viewport(self) -> Viewport:
        columns, rows = self.size if self.size is not None else get_terminal_size()
        return Viewport(columns=columns, rows=rows)

    def clear(self) -> None:
        self._buffer.append(f"{RESET}{CSI}2J{CSI}H")

    def draw_cell(self, row: int, col: int, index: int) -> None:
        self._buffer.append(f"{CSI}{row + 1};{col + 1}H{background(index)} ")

    def flush(self) -> None:
        self._buffer.append(RESET)
        self.stream.write("".join(self._buffer))
        self.stream.flush()
        self._buffer.clear()

    def wait_for_key(self, stdin: TextIO | None = None) -> str:
        """Block until a key is pressed and return it."""
        stdin = stdin if stdin is not None else sys.stdin
        if not stdin.isatty():
            return stdin.readline()[:1]
        import termios
        import tty

        fd = stdin.fileno()
        saved = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            return stdin.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
