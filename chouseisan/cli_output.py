"""CLI output formatting.

Commands print plain text by default; `--output json|yaml` switches the
structured results (candidate lines, submission responses, holiday lists)
to machine-readable form.
"""
from __future__ import annotations

import json
import sys
from dataclasses import asdict, dataclass, is_dataclass
from enum import Enum
from typing import Any, Optional, Sequence, TextIO


class OutputFormat(str, Enum):
    """Output format options."""
    TEXT = "text"
    JSON = "json"
    YAML = "yaml"


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    format: OutputFormat = OutputFormat.TEXT
    verbose: bool = False
    quiet: bool = False
    file: Optional[TextIO] = None

    @property
    def stream(self) -> TextIO:
        return self.file or sys.stdout


class OutputWriter:
    """Handles formatted output for CLI commands."""

    def __init__(self, config: Optional[OutputConfig] = None):
        self.config = config or OutputConfig()

    @property
    def structured(self) -> bool:
        return self.config.format != OutputFormat.TEXT

    def print(self, *args, **kwargs) -> None:
        """Print to the configured stream unless --quiet."""
        if self.config.quiet:
            return
        kwargs.setdefault("file", self.config.stream)
        print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)

    def print_verbose(self, message: str) -> None:
        if self.config.verbose:
            self.print(message)

    def print_data(self, data: Any) -> None:
        """Print data in the configured format (text falls back to str)."""
        if is_dataclass(data) and not isinstance(data, type):
            data = asdict(data)
        fmt = self.config.format
        # Results are always printed; --quiet only silences status messages
        if fmt == OutputFormat.JSON:
            print(json.dumps(data, ensure_ascii=False, indent=2, default=str), file=self.config.stream)
        elif fmt == OutputFormat.YAML:
            import yaml

            print(
                yaml.safe_dump(data, sort_keys=False, allow_unicode=True).rstrip("\n"),
                file=self.config.stream,
            )
        else:
            print(data, file=self.config.stream)

    def print_lines(self, lines: Sequence[str]) -> None:
        """Print one item per line (text) or the list itself (json/yaml)."""
        if self.structured:
            self.print_data(list(lines))
            return
        for line in lines:
            print(line, file=self.config.stream)
