"""Application state and configuration."""

from __future__ import annotations

from pathlib import Path

import platformdirs
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from oscmds.core.base import BaseConfig
from oscmds.core.log import Logger
from oscmds.core.redact import RedactionRules
from oscmds.core.runner import DEFAULT_PROMPT
from oscmds.core.yaml_settings import YamlWithIncludesSettingsSource


class CommandConfig(BaseModel):
    """One command entry of a command set in YAML."""

    text: str = Field(description="Shell command to run")
    failure_message: str = Field(
        default="",
        description="Message shown if the command fails",
    )
    fatal: bool = Field(
        default=False,
        description="Stop a best-effort run (and exit) if this fails",
    )


class CommandSetConfig(BaseConfig):
    """A named command set, e.g. the steps to install PostgreSQL."""

    id: str = Field(
        description="Label for the set, e.g. target distro 'ubuntu:22.04'"
    )
    description: str = Field(
        default="",
        description="Shown by `oscmds list`",
    )
    commands: list[CommandConfig] = Field(
        default_factory=list,
        description="Commands, run in order",
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI."""

    logger: Logger = Field(
        default=None,
        description="Logger configuration and runtime instance"
    )
    log_level: str = Field(
        default="info",
        alias="log-level",
        description=(
            "Console log level: 'spew', 'trace', 'debug', 'info', "
            "'warn', 'error', 'fatal'"
        ),
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("oscmds", appauthor=False))
        ),
        description="Root directory for diagnostic log files",
    )
    run_name: str = Field(
        default="oscmds",
        description="Name of this run, used in diagnostic log paths",
    )

    shell: str = Field(
        default="bash",
        description="Shell used to run commands as `<shell> -c <command>`",
    )
    prompt: str = Field(
        default=DEFAULT_PROMPT,
        description="Prefix written before each command in the command log",
    )
    check_exit_status: bool = Field(
        default=True,
        description=(
            "Treat a non-zero exit as a failure in `run`. If false, "
            "only commands that cannot be started count as failures, "
            "as in older installers"
        ),
    )
    output_log: Path | None = Field(
        default=None,
        description=(
            "File that receives command lines and command output "
            "(appended). Standard output if not set"
        ),
    )
    redaction: RedactionRules = Field(
        default_factory=RedactionRules,
        description="Secrets masked in the command log",
    )
    command_sets: dict[str, CommandSetConfig] = Field(
        default_factory=dict,
        description="Named command sets",
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode='after')
    def _setup_logger(self) -> Config:
        """Initialize the global logger once config is loaded."""
        from oscmds.core.log import setup_logger
        from oscmds.core.yaml_settings import _cleanup_bootstrap_logger

        if self.logger is None:
            self.logger = Logger(level=self.log_level)

        setup_logger(
            log_root=self.log_root,
            run_name=self.run_name,
            console=self.logger.console,
            file=self.logger.file,
            level=self.logger.level,
        )

        _cleanup_bootstrap_logger()
        return self

    def close(self):
        """Close the global logger, then any closeable children."""
        from oscmds.core.log import logger
        logger.close()
        super().close()


class State(BaseSettings):
    """Complete application state.

    Loads from YAML files with include support, a .env file and
    OSCMDS_ environment variables (nested with `__`, e.g.
    OSCMDS_CONFIG__SHELL=/bin/sh).
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration (from YAML/env/CLI)",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to include and merge. "
            "Use --include on CLI or include: in YAML files."
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="oscmds.yaml",
        env_file=".env",
        env_prefix="OSCMDS_",
        env_nested_delimiter="__",
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        arbitrary_types_allowed=True,
        extra='ignore'
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority, highest first: init args, YAML, .env, env vars,
        file secrets."""
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )


__all__ = [
    "CommandConfig",
    "CommandSetConfig",
    "Config",
    "State",
]
