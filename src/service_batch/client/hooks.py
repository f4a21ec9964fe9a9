"""
Hook pipeline for service calls.

Before hooks run ahead of the transport and may short-circuit it by setting
``context.result``; after hooks see the result; error hooks see the failure.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from service_batch.client.core import Client
    from service_batch.types.call import ServiceMethod


class HookType(str, Enum):
    """Types of hooks available."""

    BEFORE = "before"
    AFTER = "after"
    ERROR = "error"


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass
class HookContext:
    """State of one service call as it moves through the hooks.

    Attributes:
        client: Client issuing the call
        path: Service name
        method: Service method
        args: Positional arguments of the method
        params: Call params
        result: Call result (UNSET until known)
        error: Call error, if any
    """

    client: Client
    path: str
    method: ServiceMethod
    args: tuple[Any, ...] = ()
    params: dict[str, Any] = field(default_factory=dict)
    result: Any = UNSET
    error: BaseException | None = None

    @property
    def has_result(self) -> bool:
        return self.result is not UNSET


@dataclass
class Hook:
    """A registered hook.

    Attributes:
        hook_type: Type of hook
        callback: Callback receiving the HookContext (sync or async)
        priority: Execution priority (lower = first)
        name: Optional hook name
    """

    hook_type: HookType
    callback: Callable[[HookContext], Any]
    priority: int = 50
    name: str = ""

    def __lt__(self, other: Hook) -> bool:
        """Compare by priority."""
        return self.priority < other.priority


class HookManager:
    """Manages hooks and their execution.

    Example:
        >>> manager = HookManager()
        >>>
        >>> async def add_query(context):
        ...     context.params.setdefault("query", {})["active"] = True
        >>>
        >>> manager.register_many(before=[add_query])
        >>> context = await manager.run(HookType.BEFORE, context)
    """

    def __init__(self) -> None:
        self._hooks: dict[HookType, list[Hook]] = {}

    def register(
        self,
        hook_type: HookType,
        callback: Callable[[HookContext], Any],
        priority: int = 50,
        name: str = "",
    ) -> Hook:
        """Register a hook callback.

        Args:
            hook_type: Type of hook
            callback: Callback function
            priority: Execution priority (lower = first, ties keep
                registration order)
            name: Optional name for the hook

        Returns:
            The registered Hook
        """
        hook = Hook(
            hook_type=hook_type,
            callback=callback,
            priority=priority,
            name=name or getattr(callback, "__name__", type(callback).__name__),
        )

        self._hooks.setdefault(hook_type, []).append(hook)
        self._hooks[hook_type].sort()

        return hook

    def register_many(
        self,
        *,
        before: Iterable[Callable[[HookContext], Any]] | None = None,
        after: Iterable[Callable[[HookContext], Any]] | None = None,
        error: Iterable[Callable[[HookContext], Any]] | None = None,
    ) -> None:
        """Register lists of hooks per type."""
        for hook_type, callbacks in (
            (HookType.BEFORE, before),
            (HookType.AFTER, after),
            (HookType.ERROR, error),
        ):
            for callback in callbacks or ():
                self.register(hook_type, callback)

    async def run(self, hook_type: HookType, context: HookContext) -> HookContext:
        """Run all hooks of a type sequentially.

        A hook may mutate the context in place or return a replacement.
        Exceptions raised by a hook propagate to the caller.

        Args:
            hook_type: Type of hook to run
            context: Call context

        Returns:
            The final context
        """
        for hook in self._hooks.get(hook_type, []):
            outcome = hook.callback(context)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            if isinstance(outcome, HookContext):
                context = outcome
        return context
