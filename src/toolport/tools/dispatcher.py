"""
Invocation dispatcher.

Turns a tool name plus untrusted arguments into a ToolResult:
lookup, validate, invoke, normalize. Every path ends in a well-formed
result; nothing raised by a handler escapes to the caller.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Mapping
from typing import Any

from toolport.tools.errors import ToolError, ToolExecutionError, ToolNotFoundError, ValidationError
from toolport.tools.models import ToolCall, ToolResult
from toolport.tools.registry import ToolRegistry
from toolport.tools.validation import validate

logger = logging.getLogger(__name__)


class ToolDispatcher:
    """Stateless pipeline over a registry.

    The dispatcher keeps no per-call state, so concurrent invocations on
    the same event loop never interfere with each other. Retries are not
    attempted here.
    """

    def __init__(self, registry: ToolRegistry):
        self.registry = registry

    async def invoke(self, tool_name: str, raw_arguments: Mapping[str, Any] | None = None) -> ToolResult:
        """Invoke a tool by name.

        Args:
            tool_name: Registered tool name
            raw_arguments: Untrusted arguments from the caller

        Returns:
            ToolResult, with ``is_error`` set on any failure
        """
        try:
            definition = self.registry.lookup(tool_name)
        except ToolNotFoundError as e:
            logger.warning(str(e))
            return ToolResult.failure(str(e))

        try:
            arguments = validate(definition.parameters, raw_arguments)
        except ValidationError as e:
            logger.info(f"Rejected arguments for {tool_name}: {e}")
            return ToolResult.failure(f"Invalid arguments for tool '{tool_name}': {e}")

        logger.debug(f"Invoking tool: {tool_name}")
        started = time.monotonic()

        try:
            outcome = definition.handler(**arguments)
            if inspect.isawaitable(outcome):
                outcome = await outcome
            result = _normalize(outcome)

        except asyncio.CancelledError:
            raise

        except ToolExecutionError as e:
            logger.warning(f"Tool {tool_name} fault (exit code {e.exit_code}): {e}")
            result = ToolResult.failure(str(e))

        except ToolError as e:
            # Handler-level business failure (denied path, bad repo, ...)
            logger.info(f"Tool {tool_name} refused: {e}")
            result = ToolResult.failure(str(e))

        except (asyncio.TimeoutError, TimeoutError):
            logger.warning(f"Tool {tool_name} timed out")
            result = ToolResult.failure(f"Tool '{tool_name}' timed out")

        except Exception as e:
            logger.error(f"Tool {tool_name} failed: {e}", exc_info=True)
            result = ToolResult.failure(f"Tool '{tool_name}' failed: {e or type(e).__name__}")

        elapsed = time.monotonic() - started
        logger.debug(
            f"Tool {tool_name} finished in {elapsed:.3f}s "
            f"({'error' if result.is_error else 'ok'})"
        )
        return result

    async def invoke_call(self, call: ToolCall) -> ToolResult:
        """Invoke a tool from a ToolCall."""
        return await self.invoke(call.name, call.arguments)


def _normalize(outcome: Any) -> ToolResult:
    if isinstance(outcome, ToolResult):
        return outcome
    if isinstance(outcome, str):
        return ToolResult.success(outcome)
    if outcome is None:
        return ToolResult.success("(no output)")
    return ToolResult.success(str(outcome))
