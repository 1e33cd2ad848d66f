"""py-sh — a small Unix shell with pipelines, redirection and subshells.

Re-exports public symbols so callers can write::

    from py_sh import Shell, parse
"""

from py_sh.config import ShellConfig, load_config
from py_sh.errors import (
    CapacityError,
    ConfigError,
    ForkError,
    ParseError,
    ShellError,
    ShellSyntaxError,
)
from py_sh.executor import SequenceExecutor
from py_sh.model import ChainCondition, Command, CommandModel, PipelineSpec
from py_sh.orchestrator import ProcessOrchestrator, reap_children
from py_sh.parser import parse
from py_sh.shell import Shell

__version__ = "0.1.0"

__all__ = [
    "CapacityError",
    "ChainCondition",
    "Command",
    "CommandModel",
    "ConfigError",
    "ForkError",
    "ParseError",
    "PipelineSpec",
    "ProcessOrchestrator",
    "SequenceExecutor",
    "Shell",
    "ShellConfig",
    "ShellError",
    "ShellSyntaxError",
    "load_config",
    "parse",
    "reap_children",
]
