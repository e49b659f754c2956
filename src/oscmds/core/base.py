"""Base classes for configuration models.

This module holds the pieces shared by config.py and log.py:
- Closeable Protocol for resource cleanup
- BaseCloseable, which closes its Closeable fields on close()
- BaseConfig, the marker base for every configuration section

Kept apart from config.py so that log.py can import it without a
circular dependency.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        """Release resources."""
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable children.

    Used as a context manager, close() walks every field and calls
    close() on anything that has it, so the chain
    Config.close() -> Logger.close() -> FileSink.close()
    releases open log files even when a command batch blows up.
    """

    def close(self):
        """Close all closeable child objects.

        A child that fails to close is reported on stderr and the
        remaining children are still closed.
        """
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None:
                continue

            if isinstance(child, Closeable):
                try:
                    child.close()
                except Exception as e:
                    print(
                        f"Warning: Error closing {field_name}: {e}",
                        file=sys.stderr,
                    )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Base class for all configuration sections.

    Marks a model as configuration loaded from YAML/env/CLI.
    """
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig"]
