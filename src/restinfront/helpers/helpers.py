"""
Helper Utilities.

Provides utility functions for name conversion, URL path joining and for
normalizing user supplied hooks into callables with a fixed calling convention.
"""

import copy
import logging as log
import inspect
import re
from typing import Any, Callable, Optional


def camel_to_snake(name: str) -> str:
    """
    Converts a string from CamelCase or PascalCase into snake_case.

    Used to derive the registry name of a model class.

    Examples:
        - "BlogPost" -> "blog_post"
        - "URLConverter" -> "url_converter"

    Args:
        name: The input string in CamelCase or PascalCase format.

    Returns:
        The converted string in snake_case format.
    """
    # 'BlogPost' -> 'Blog_Post'
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    # Trailing acronyms and digits: 'Post2FA' -> 'Post2_FA'
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.lower()


def join_paths(*segments: Any) -> str:
    """
    Joins URL path segments with exactly one '/' between them.

    Empty and None segments are skipped. The first segment keeps its leading part
    untouched (e.g. the 'https://' of a base URL), the others are stripped of
    surrounding slashes. Non-string segments (e.g. integer primary keys) are
    converted with `str()`.

    Examples:
        - join_paths("https://api.io/", "/users/", "42") -> "https://api.io/users/42"
        - join_paths("users", "", None) -> "users"
    """
    parts: list[str] = []
    for segment in segments:
        if segment is None or segment == "":
            continue
        text = str(segment)
        if not parts:
            parts.append(text.rstrip("/"))
            continue
        stripped = text.strip("/")
        if stripped:
            parts.append(stripped)
    return "/".join(parts)


def normalize_callable(fn: Callable[..., Any], arity: int) -> Callable[..., Any]:
    """
    Wraps `fn` so that it can always be called with `arity` positional arguments.

    User hooks may declare fewer parameters than the library passes (e.g. an
    `is_valid` written as `lambda value: ...` while the library calls it with
    `(value, entity)`); surplus arguments are dropped.

    Args:
        fn: The user supplied callable.
        arity: The number of positional arguments call sites will pass.

    Returns:
        A callable accepting `arity` positional arguments.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        # builtins without introspectable signature are passed through
        return fn

    accepted = 0
    for param in signature.parameters.values():
        if param.kind == param.VAR_POSITIONAL:
            return fn
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            accepted += 1

    if accepted >= arity:
        return fn

    def _wrapped(*args: Any) -> Any:
        return fn(*args[:accepted])

    return _wrapped


def as_callable(value: Any, arity: int) -> Callable[..., Any]:
    """
    Coerces a constant or a callable into a callable of the given arity.

    Constants are deep-copied on every call so that mutable defaults
    (lists, dicts) are never shared between entities.
    """
    if callable(value):
        return normalize_callable(value, arity)

    def _constant(*_args: Any) -> Any:
        return copy.deepcopy(value)

    return _constant


def call_hook(hook: Optional[Callable[..., Any]], *args: Any, **kwargs: Any) -> None:
    """
    Invokes a user hook, if set.

    An exception raised by the hook is logged and not propagated, so the
    library state stays consistent whatever the hook does.
    """
    if hook is None:
        return
    try:
        hook(*args, **kwargs)
    except Exception:
        log.exception(f"User hook '{getattr(hook, '__name__', hook)}' raised an error")
