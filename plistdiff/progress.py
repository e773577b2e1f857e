# Copyright Red Hat
#
# plistdiff/progress.py - Property list differ terminal output
#
# This file is part of the plistdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Terminal control and live-updating output.
"""
from typing import List, Optional, TextIO
import curses
import sys
import os
import re

from plistdiff import register_writer, unregister_writer

#: Default number of columns if not detected from terminal.
DEFAULT_COLUMNS = 80


class TermControl:
    """
    A class for portable terminal control and output.

    Uses the curses package to set up appropriate terminal control
    sequences for the current terminal.

    Inspired by and adapted from:

      https://code.activestate.com/recipes/475116-using-terminfo-for-portable-color-output-cursor-co/

      Copyright Edward Loper and released under the PSF license.

    `TermControl` defines a set of instance variables whose values are
    initialized to the control sequence necessary to perform a given
    action. These can be simply included in normal output to the terminal:

        >>> term = TermControl()
        >>> print("This is " + term.GREEN + "green" + term.NORMAL)

    Alternatively, the `render()` method can used, which replaces
    '${action}' with the string required to perform 'action':

        >>> term = TermControl()
        >>> print(term.render("This is ${GREEN}green${NORMAL}"))

    If the terminal doesn't support a given action, then the value of the
    corresponding instance variable will be set to ''. Output written with
    it still works on terminals without those capabilities, just without
    the effect.
    """

    # Cursor movement:
    BOL: str = ""  #: Move the cursor to the beginning of the line
    UP: str = ""  #: Move the cursor up one line

    # Deletion:
    CLEAR_EOL: str = ""  #: Clear to the end of the line.
    CLEAR_EOS: str = ""  #: Clear to the end of the screen

    # Output modes:
    BOLD: str = ""  #: Turn on bold mode
    NORMAL: str = ""  #: Turn off all modes

    # Cursor display:
    HIDE_CURSOR: str = ""  #: Make the cursor invisible
    SHOW_CURSOR: str = ""  #: Make the cursor visible

    # Foreground colors:
    BLACK: str = ""  #: Black foreground color
    BLUE: str = ""  #: Blue foreground color
    GREEN: str = ""  #: Green foreground color
    CYAN: str = ""  #: Cyan foreground color
    RED: str = ""  #: Red foreground color
    MAGENTA: str = ""  #: Magenta foreground color
    YELLOW: str = ""  #: Yellow foreground color
    WHITE: str = ""  #: White foreground color

    # Terminal size:
    columns: Optional[int] = None  #: Terminal width
    lines: Optional[int] = None  #: Terminal height

    _STRING_CAPABILITIES: List[str] = (
        """
    BOL:cr UP:cuu1 CLEAR_EOL:el CLEAR_EOS:ed BOLD:bold NORMAL:sgr0
    HIDE_CURSOR:civis SHOW_CURSOR:cnorm""".split()
    )
    _LEGACY_COLORS: List[str] = (
        """BLACK BLUE GREEN CYAN RED MAGENTA YELLOW WHITE""".split()
    )
    _ANSI_COLORS: List[str] = "BLACK RED GREEN YELLOW BLUE MAGENTA CYAN WHITE".split()

    def _force_ansi(self):
        ansi_codes = {
            "BLACK": "\033[0;30m",
            "RED": "\033[0;31m",
            "GREEN": "\033[0;32m",
            "YELLOW": "\033[0;33m",
            "BLUE": "\033[0;34m",
            "MAGENTA": "\033[0;35m",
            "CYAN": "\033[0;36m",
            "WHITE": "\033[0;37m",
        }
        for color, code in ansi_codes.items():
            setattr(self, color, code)

        self.BOLD = "\033[1m"
        # Work around `less -R` not liking "\033[0m" (ANSI reset)
        self.NORMAL = ansi_codes["WHITE"]

    def _init_colors(self):
        """
        Initialize terminal color codes.
        """
        set_fg = self._tigetstr("setf")
        if set_fg:
            set_fg = set_fg.encode("utf8")
            for i, color in enumerate(self._LEGACY_COLORS):
                setattr(self, color, curses.tparm(set_fg, i).decode("utf8") or "")
        set_fg_ansi = self._tigetstr("setaf")
        if set_fg_ansi:
            set_fg_ansi = set_fg_ansi.encode("utf8")
            for i, color in enumerate(self._ANSI_COLORS):
                setattr(self, color, curses.tparm(set_fg_ansi, i).decode("utf8") or "")

    def __init__(self, term_stream: Optional[TextIO] = None, color: str = "auto"):
        """
        Initialize terminal capabilities and size information.

        If the output stream is not a tty or terminal setup fails,
        the instance will have no terminal capabilities (all control
        attributes remain empty strings or None).

        :param term_stream: Output stream to query for capabilities.
        :type term_stream: ``Optional[TextIO]``
        :param color: A string to control color rendering: "auto", "always", or
                      "never".
        :type color: ``str``
        """
        if term_stream is None:
            term_stream = sys.stdout

        self.term_stream = term_stream

        if color != "always":
            if not hasattr(term_stream, "isatty") or not term_stream.isatty():
                return

        # If terminfo is unavailable assume the terminal has no capabilities.
        # curses.error is not reliably catchable by class, so catch broadly.
        try:
            curses.setupterm()
        except BaseException as err:  # pylint: disable=broad-exception-caught
            if isinstance(err, (KeyboardInterrupt, SystemExit)):  # pragma: no cover
                raise
            if color == "always":
                self._force_ansi()
            return

        self.columns = curses.tigetnum("cols")
        self.lines = curses.tigetnum("lines")

        for capability in self._STRING_CAPABILITIES:
            (attr, cap_name) = capability.split(":")
            setattr(self, attr, self._tigetstr(cap_name) or "")

        if color != "never":
            self._init_colors()

    def _tigetstr(self, cap_name):
        # String capabilities can include "delays" of the form "$<2>".
        # For any modern terminal, we should be able to just ignore
        # these, so strip them out.
        cap = curses.tigetstr(cap_name)
        cap = cap.decode(encoding="utf8") if cap else ""
        return cap.split("$", maxsplit=1)[0]

    @property
    def can_repaint(self) -> bool:
        """
        True if this terminal can erase and redraw previous output.

        :returns: ``True`` if the cursor movement and clearing capabilities
                  needed to repaint a block of lines are available.
        :rtype: ``bool``
        """
        return bool(self.UP and self.BOL and self.CLEAR_EOS)

    def render(self, template):
        """
        Replace each $-substitution with the corresponding control.

        Replace each $-substitution in the template string with the
        corresponding terminal control string (if defined) or an
        empty string (if not defined).

        :param template: Template string containing ${NAME} patterns.
        :type template: ``str``
        :returns: Rendered string with substitutions applied.
        :rtype: ``str``
        """
        return re.sub(r"\$\$|\${\w+}", self._render_sub, template)

    def _render_sub(self, match):
        s = match.group()
        if s == "$$":
            return "$"
        return getattr(self, s[2:-1], "")


def _flush_with_broken_pipe_guard(stream: TextIO) -> None:
    """
    Handle ``BrokenPipeError`` when attempting to flush output streams.

    :param stream: The stream to flush.
    :type stream: TextIO
    """
    if stream is None or not hasattr(stream, "flush"):
        return
    try:
        stream.flush()
    except BrokenPipeError as err:
        devnull = os.open(os.devnull, os.O_WRONLY)
        try:
            if hasattr(stream, "fileno"):
                os.dup2(devnull, stream.fileno())
        finally:
            os.close(devnull)
        raise SystemExit() from err


class LiveWriter:
    """
    Live-updating output sink.

    Each call to ``update()`` replaces the block written by the previous
    call when the output stream is a terminal that supports cursor
    movement, and appends to the stream otherwise.
    """

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        term_control: Optional[TermControl] = None,
        register: bool = True,
    ):
        """
        Initialise a new ``LiveWriter``.

        :param stream: The stream to write to (default ``sys.stdout``).
        :type stream: ``Optional[TextIO]``
        :param term_control: An optional ``TermControl`` instance for
                             ``stream``.
        :type term_control: ``Optional[TermControl]``
        :param register: Register with the log handler so that log messages
                         are not erased by the next repaint.
        :type register: ``bool``
        """
        self.stream: TextIO = stream or sys.stdout
        self.term: TermControl = term_control or TermControl(term_stream=self.stream)
        self.registered: bool = False
        self._register: bool = register
        self._lines: int = 0
        self._started: bool = False

    def _count_lines(self, text: str) -> int:
        """
        Count the terminal lines occupied by ``text`` once written, allowing
        for lines that wrap at the terminal width.

        :param text: The text to measure.
        :type text: ``str``
        :returns: The number of terminal rows used.
        :rtype: ``int``
        """
        columns = self.term.columns or DEFAULT_COLUMNS
        rows = 0
        for line in text.split("\n"):
            width = len(line.expandtabs())
            rows += max(1, -(-width // columns))
        return rows

    def reset_position(self):
        """
        Forget the previously written block so that it is not erased by the
        next update.
        """
        self._lines = 0

    def start(self):
        """
        Start live output.
        """
        if self._started:
            return
        self._started = True
        if self._register:
            register_writer(self)
        if self.term.can_repaint and self.term.HIDE_CURSOR:
            self.stream.write(self.term.HIDE_CURSOR)
            _flush_with_broken_pipe_guard(self.stream)

    def update(self, text: str):
        """
        Replace the current live output block with ``text``.

        :param text: The text to display. A trailing newline is added.
        :type text: ``str``
        """
        if not self._started:
            self.start()
        if self.term.can_repaint and self._lines:
            self.stream.write(self.term.UP * self._lines + self.term.BOL)
            self.stream.write(self.term.CLEAR_EOS)
        self.stream.write(text + "\n")
        _flush_with_broken_pipe_guard(self.stream)
        self._lines = self._count_lines(text)

    def stop(self):
        """
        Stop live output, leaving the last block on screen.
        """
        if not self._started:
            return
        self._started = False
        if self.term.can_repaint and self.term.SHOW_CURSOR:
            self.stream.write(self.term.SHOW_CURSOR)
            _flush_with_broken_pipe_guard(self.stream)
        if self.registered:
            unregister_writer(self)
        self._lines = 0
