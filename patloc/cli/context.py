"""CLI command context shared by every command."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from loguru import logger
from rich.console import Console

from ..config.loader import get_config
from ..config.schemas import PipelineConfig


@dataclass
class CommandContext:
    """Shared context for CLI commands.

    Attributes:
        config: Pipeline configuration
        console: Rich console for formatted output
        run_id: Unique identifier for this CLI session
    """

    config: PipelineConfig
    console: Console
    run_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    def __post_init__(self) -> None:
        self.logger = logger.bind(
            component="cli", run_id=self.run_id, environment=self.config.pipeline.environment
        )

    @classmethod
    def create(cls, environment: str | None = None, run_id: str | None = None) -> CommandContext:
        """Load configuration for ``environment`` and build the context."""
        config = get_config(environment=environment)
        if run_id:
            return cls(config=config, console=Console(), run_id=run_id)
        return cls(config=config, console=Console())
