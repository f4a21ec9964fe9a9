"""
Batch configuration.

One BatchConfig is passed to each integration point; validation happens when
the integration point is set up, never at call time.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any

from service_batch.errors import ConfigurationError


@dataclass(frozen=True)
class BatchConfig:
    """Configuration for batching.

    Attributes:
        batch_service: Name of the batch endpoint service (required)
        exclude: Service names that are never batched
        timeout: Seconds to hold an implicit window open; 0 closes it at the
            end of the current event loop iteration
    """

    batch_service: str = ""
    exclude: tuple[str, ...] = ()
    timeout: float = 0.0

    def __post_init__(self) -> None:
        if isinstance(self.batch_service, str):
            object.__setattr__(self, "batch_service", self.batch_service.strip("/"))
        exclude = self.exclude
        if exclude is None:
            exclude = ()
        elif isinstance(exclude, str):
            exclude = (exclude,)
        elif not isinstance(exclude, Iterable):
            raise ConfigurationError(
                "`exclude` must be a service name or a list of service names",
                option="exclude",
            )
        object.__setattr__(self, "exclude", tuple(str(name).strip("/") for name in exclude))

    @classmethod
    def coerce(
        cls,
        options: BatchConfig | Mapping[str, Any] | None,
        *,
        owner: str,
    ) -> BatchConfig:
        """Build and validate a config from what an integration point received.

        Args:
            options: A BatchConfig or a mapping of its fields
            owner: Integration point name, used in error messages

        Returns:
            Validated BatchConfig

        Raises:
            ConfigurationError: If the options are invalid
        """
        if isinstance(options, BatchConfig):
            config = options
        elif options is None:
            config = cls()
        elif isinstance(options, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = sorted(set(options) - known)
            if unknown:
                raise ConfigurationError(
                    f"Unknown option(s) passed to {owner}: {', '.join(unknown)}",
                    option=unknown[0],
                )
            config = cls(**options)
        else:
            raise ConfigurationError(
                f"Options passed to {owner} must be a BatchConfig or a mapping"
            )
        return config.validate(owner)

    def validate(self, owner: str) -> BatchConfig:
        """Check the config for an integration point.

        Raises:
            ConfigurationError: If batch_service is missing or empty, or the
                timeout is invalid
        """
        if not isinstance(self.batch_service, str) or not self.batch_service:
            raise ConfigurationError(
                f"`batch_service` name option must be passed to {owner}",
                option="batch_service",
            )
        if isinstance(self.timeout, bool) or not isinstance(self.timeout, (int, float)):
            raise ConfigurationError(
                f"`timeout` passed to {owner} must be a number of seconds",
                option="timeout",
            )
        if self.timeout < 0:
            raise ConfigurationError(
                f"`timeout` passed to {owner} must not be negative",
                option="timeout",
            )
        return self
