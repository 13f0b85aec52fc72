"""Handler introspection.

A handler is any callable shaped like ``handler(channel)`` or
``handler(channel, data)``. The annotation of ``data`` decides how the
inbound JSON payload is decoded, and a non-``None`` return annotation marks
the handler as able to answer ack requests.
"""

import inspect
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pydantic import PydanticUserError, TypeAdapter

logger = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class RegistrationError(Exception):
    """Raised when a handler's signature cannot be used for dispatch."""


@dataclass(frozen=True)
class Caller:
    """A registered handler together with its introspected shape."""

    func: Callable[..., Any]
    args_present: bool
    args_type: Any
    adapter: TypeAdapter | None
    has_output: bool

    def decode(self, raw: str | bytes) -> Any:
        """Decode a JSON payload into a fresh value of the handler's data type.

        Raises:
            pydantic.ValidationError: If the payload is not valid JSON or does
                not match the annotated type.
        """
        if self.adapter is None:
            return None
        return self.adapter.validate_json(raw)

    async def invoke(self, channel: Any, data: Any = None) -> Any:
        """Call the handler, awaiting it when it is a coroutine."""
        if self.args_present:
            result = self.func(channel, data)
        else:
            result = self.func(channel)
        if inspect.isawaitable(result):
            result = await result
        return result


def new_caller(func: Callable[..., Any]) -> Caller:
    """Introspect a handler and build its Caller.

    Args:
        func: The user handler.

    Returns:
        The Caller wrapping ``func``.

    Raises:
        RegistrationError: If ``func`` does not take a channel as its first
            argument, takes more than one data argument, or annotates its
            data argument with a type that cannot be decoded from JSON.
    """
    if not callable(func):
        raise RegistrationError(f"Handler {func!r} is not callable")

    try:
        sig = inspect.signature(func, eval_str=True)
    except (NameError, AttributeError, SyntaxError) as e:
        raise RegistrationError(f"Cannot resolve annotations of {func!r}: {e}") from e
    except (TypeError, ValueError) as e:
        raise RegistrationError(f"Cannot inspect signature of {func!r}: {e}") from e

    params = list(sig.parameters.values())
    if any(p.kind == inspect.Parameter.VAR_POSITIONAL for p in params):
        raise RegistrationError(f"Handler {func!r} must not take *args")
    if any(
        p.kind == inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
        for p in params
    ):
        raise RegistrationError(f"Handler {func!r} has required keyword-only arguments")

    positional = [p for p in params if p.kind in _POSITIONAL]
    if not positional:
        raise RegistrationError(f"Handler {func!r} must accept a channel as its first argument")
    if len(positional) > 2 and positional[2].default is inspect.Parameter.empty:
        raise RegistrationError(f"Handler {func!r} accepts at most one data argument")

    args_present = len(positional) >= 2
    args_type: Any = None
    adapter = None
    if args_present:
        args_type = positional[1].annotation
        if args_type is inspect.Parameter.empty:
            args_type = Any
        try:
            adapter = TypeAdapter(args_type)
        except PydanticUserError as e:
            raise RegistrationError(
                f"Data argument of {func!r} cannot be decoded from JSON: {e}"
            ) from e

    has_output = sig.return_annotation not in (inspect.Signature.empty, None, type(None))

    logger.debug(
        "Introspected handler %r: args_present=%s args_type=%r has_output=%s",
        func,
        args_present,
        args_type,
        has_output,
    )
    return Caller(
        func=func,
        args_present=args_present,
        args_type=args_type,
        adapter=adapter,
        has_output=has_output,
    )
