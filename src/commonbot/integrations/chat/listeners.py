"""Listener and router registries used by the dispatcher.

Listeners carry ordered matchers (predicate plus handlers) for plain
messages. The router holds the single active route for interactive events.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Pattern, Union

from .models import ChatContextData

MatcherPredicate = Callable[[ChatContextData], bool]
ContextHandler = Callable[[ChatContextData], Awaitable[None]]


@dataclass
class Matcher:
    predicate: MatcherPredicate
    handlers: list[ContextHandler] = field(default_factory=list)


class Listener:
    """Ordered set of matchers registered by one piece of business logic."""

    def __init__(self, matchers: Optional[list[Matcher]] = None) -> None:
        self._matchers: list[Matcher] = list(matchers or [])

    @property
    def matchers(self) -> tuple[Matcher, ...]:
        return tuple(self._matchers)

    def add_matcher(
        self, predicate: MatcherPredicate, *handlers: ContextHandler
    ) -> Matcher:
        matcher = Matcher(predicate=predicate, handlers=list(handlers))
        self._matchers.append(matcher)
        return matcher


@dataclass(frozen=True)
class Route:
    handler: ContextHandler
    name: str = ""


class Router:
    """Holds the currently active navigation route."""

    def __init__(self, route: Optional[Route] = None) -> None:
        self._route = route

    def route(self, handler: ContextHandler, *, name: str = "") -> Route:
        self._route = Route(handler=handler, name=name or _handler_name(handler))
        return self._route

    def get_route(self) -> Optional[Route]:
        return self._route

    def clear(self) -> None:
        self._route = None


def text_matches(pattern: Union[str, Pattern[str]]) -> MatcherPredicate:
    """Predicate that searches message payloads for ``pattern``."""

    compiled = re.compile(pattern) if isinstance(pattern, str) else pattern

    def _predicate(context: ChatContextData) -> bool:
        text = context.message
        return text is not None and compiled.search(text) is not None

    return _predicate


def _handler_name(handler: ContextHandler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)
