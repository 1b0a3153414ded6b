"""
=============================================================================
COMMAND BRIDGE
=============================================================================

Runs an executable resource on behalf of a POST request and returns what
it printed.

=============================================================================
FROM REQUEST BODY TO ARGUMENT LIST
=============================================================================

    POST /tools/greet.shar HTTP/1.1
    Content-Length: 20

    name=ada&greeting=hi

        │  parse_arguments()  - keep the VALUES, drop the keys
        ▼

    ["/srv/tools/greet.shar", "ada", "hi"]

        │  CommandBridge.run()
        ▼

    stdout "hi\nada\n"  →  "hiada"   (line breaks dropped, lines concatenated)

=============================================================================
WHAT THIS DOES NOT DO
=============================================================================

- No shell: arguments are passed straight to the program, so "a;rm -rf"
  is one literal argument, not two commands.
- No exit status check: a program that fails but prints something
  still produces a 200 with that output.
- No timeout unless one is configured (ServerConfig.command_timeout).
  Without it a program that never exits blocks its worker forever.

Anything wanting a stricter policy (allow-list, sandbox) can subclass
CommandBridge and hand the instance to the dispatcher.

=============================================================================
"""

import logging
import re
import subprocess
from typing import Optional, Sequence

from .exceptions import CommandError


logger = logging.getLogger(__name__)


# Same line terminators a line reader recognizes: CRLF, CR, LF
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def parse_arguments(body: bytes) -> list[str]:
    """
    Extract positional arguments from an "a=1&b=2" request body.

    Only values are kept, in the order they appear. A pair counts when
    splitting it on "=" leaves exactly two pieces once trailing empty
    pieces are dropped; everything else is skipped silently.

    Examples:
        >>> parse_arguments(b"a=1&b=2")
        ['1', '2']

        >>> parse_arguments(b"flag&x=&=5&k=v=w&last=end")
        ['5', 'end']
    """
    values = []
    for pair in body.decode("utf-8", errors="replace").split("&"):
        pieces = pair.split("=")
        while pieces and pieces[-1] == "":
            pieces.pop()
        if len(pieces) == 2:
            values.append(pieces[1])
    return values


def join_output_lines(output: str) -> str:
    """Drop line terminators and concatenate the lines with no separator."""
    return "".join(_LINE_BREAK.split(output))


class CommandBridge:
    """
    Synchronous launcher for executable resources.

    Attributes:
        timeout: Seconds to wait for the program, or None to wait
                 indefinitely.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> str:
        """
        Run a program and capture its standard output.

        Args:
            args: Program path followed by its positional arguments.

        Returns:
            Standard output with line breaks removed.

        Raises:
            CommandError: The program could not be started, its output
                          could not be read, or the timeout expired.
        """
        argv = [str(arg) for arg in args]
        logger.debug(f"Running command: {argv}")

        try:
            completed = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                check=False,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"Command timed out after {self.timeout}s: {argv[0]}")
            raise CommandError("Command timed out") from e
        except (OSError, ValueError) as e:
            logger.error(f"Failed to run {argv[0]}: {e}")
            raise CommandError("Failed to run command") from e

        logger.debug(f"Command {argv[0]} exited with status {completed.returncode}")

        output = completed.stdout.decode("utf-8", errors="replace")
        return join_output_lines(output)
