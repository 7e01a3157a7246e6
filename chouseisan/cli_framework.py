"""Declarative argparse wrapper for the chouseisan CLI.

Commands register with decorators; the app adds the common flags
(--verbose, --quiet, --output), configures logging, attaches an
`OutputWriter` to the parsed args, and maps exceptions to exit codes.
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .cli_errors import CLIError, ExitCode, handle_error
from .cli_output import OutputConfig, OutputFormat, OutputWriter

CommandFunc = Callable[[argparse.Namespace], int]

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


@dataclass
class Argument:
    """Definition of a CLI argument."""
    name_or_flags: tuple
    kwargs: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CommandDef:
    """Definition of a CLI command."""
    name: str
    func: CommandFunc
    help: str = ""
    description: str = ""
    arguments: List[Argument] = field(default_factory=list)


def configure_logging(verbose: bool = False) -> None:
    """Route library logging to stderr; DEBUG with --verbose, else WARNING."""
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)
    root.setLevel(level)


class CLIApp:
    """Base class for CLI applications.

    Example usage:
        app = CLIApp("chouseisan", "Candidate date generator")

        @app.command("generate", help="Print candidate lines")
        @app.argument("--start-date", required=True)
        def cmd_generate(args):
            ...
            return 0

        if __name__ == "__main__":
            raise SystemExit(app.run())
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        version: Optional[str] = None,
    ):
        self.name = name
        self.description = description
        self.version = version

        self._commands: Dict[str, CommandDef] = {}
        self._parser: Optional[argparse.ArgumentParser] = None
        self._pending_arguments: List[Argument] = []

    @property
    def commands(self) -> Dict[str, CommandDef]:
        return dict(self._commands)

    def command(
        self,
        name: str,
        *,
        help: str = "",
        description: str = "",
    ) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to register a command.

        Arguments declared with @argument below this decorator are attached
        to the command in declaration order.
        """
        def decorator(func: CommandFunc) -> CommandFunc:
            arguments = list(reversed(self._pending_arguments))
            self._pending_arguments.clear()
            self._commands[name] = CommandDef(
                name=name,
                func=func,
                help=help,
                description=description or help,
                arguments=arguments,
            )
            return func
        return decorator

    def argument(
        self,
        *name_or_flags: str,
        **kwargs: Any,
    ) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to add an argument to the next command.

        Must be used BEFORE the @command decorator (decorators apply bottom-up).
        """
        def decorator(func: CommandFunc) -> CommandFunc:
            self._pending_arguments.append(Argument(name_or_flags, kwargs))
            return func
        return decorator

    def build_parser(self) -> argparse.ArgumentParser:
        """Build the argument parser."""
        parser = argparse.ArgumentParser(
            prog=self.name,
            description=self.description,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        if self.version:
            parser.add_argument(
                "--version", "-V",
                action="version",
                version=f"%(prog)s {self.version}",
            )
        self._add_common_arguments(parser)

        if self._commands:
            subparsers = parser.add_subparsers(dest="command", metavar="<command>")
            for cmd_def in self._commands.values():
                cmd_parser = subparsers.add_parser(
                    cmd_def.name,
                    help=cmd_def.help,
                    description=cmd_def.description,
                )
                for arg in cmd_def.arguments:
                    cmd_parser.add_argument(*arg.name_or_flags, **arg.kwargs)
                cmd_parser.set_defaults(_cmd_func=cmd_def.func)

        self._parser = parser
        return parser

    def _add_common_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Enable verbose output and debug logging",
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output",
        )
        parser.add_argument(
            "--output", "-o",
            choices=[f.value for f in OutputFormat],
            default=OutputFormat.TEXT.value,
            help="Output format (default: text)",
        )

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Run the CLI application and return the exit code."""
        parser = self._parser or self.build_parser()
        args = parser.parse_args(argv)

        verbose = bool(getattr(args, "verbose", False))
        configure_logging(verbose)
        args._output = OutputWriter(OutputConfig(
            format=OutputFormat(getattr(args, "output", "text")),
            verbose=verbose,
            quiet=bool(getattr(args, "quiet", False)),
        ))

        cmd_func = getattr(args, "_cmd_func", None)
        if cmd_func is None:
            parser.print_help()
            return ExitCode.USAGE

        try:
            return int(cmd_func(args))
        except CLIError as e:
            return handle_error(e, verbose=verbose)
        except KeyboardInterrupt as e:
            return handle_error(e)
        except Exception as e:
            return handle_error(e, verbose=verbose)
