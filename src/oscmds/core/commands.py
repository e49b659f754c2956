"""Command set data model."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class CommandDescriptor(BaseModel):
    """One shell command and how to treat its failure."""

    text: str = Field(description="Shell command, executed verbatim")
    failure_message: str = Field(
        default="",
        description="Message surfaced if this command fails",
    )
    fatal: bool = Field(
        default=False,
        description=(
            "Failure ends a best-effort batch and the process"
        ),
    )


class CommandSet(BaseModel):
    """Ordered commands to perform one action, e.g. install a DB.

    Stored as three parallel sequences that always have the same
    length; append() is the only way to grow them.
    """

    identifier: str = Field(
        description=(
            "Caller's label for the set, e.g. 'ubuntu:22.04'. "
            "Not interpreted here"
        )
    )
    texts: list[str] = Field(default_factory=list)
    failure_messages: list[str] = Field(default_factory=list)
    fatal: list[bool] = Field(default_factory=list)

    @model_validator(mode="after")
    def _sequences_aligned(self) -> CommandSet:
        lengths = {
            len(self.texts), len(self.failure_messages), len(self.fatal)
        }
        if len(lengths) != 1:
            raise ValueError(
                f"Command set {self.identifier!r} has misaligned "
                f"sequences: {len(self.texts)} commands, "
                f"{len(self.failure_messages)} messages, "
                f"{len(self.fatal)} fatal flags"
            )
        return self

    @classmethod
    def from_config(cls, config) -> CommandSet:
        """Build a set from a CommandSetConfig loaded from YAML."""
        command_set = cls(identifier=config.id)
        for command in config.commands:
            command_set.append(
                command.text, command.failure_message, command.fatal
            )
        return command_set

    def append(self, text: str, failure_message: str, fatal: bool) -> None:
        """Add a command to the end of the set.

        Args:
            text: Shell command; any shell syntax is accepted
            failure_message: Message surfaced if the command fails
            fatal: Whether failure must stop a best-effort batch
        """
        self.texts.append(text)
        self.failure_messages.append(failure_message)
        self.fatal.append(fatal)

    @property
    def commands(self) -> list[CommandDescriptor]:
        return [
            CommandDescriptor(text=text, failure_message=message, fatal=hard)
            for text, message, hard in zip(
                self.texts, self.failure_messages, self.fatal, strict=True
            )
        ]

    def __len__(self) -> int:
        return len(self.texts)
