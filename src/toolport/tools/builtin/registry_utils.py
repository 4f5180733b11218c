"""Utility functions for tool registry setup."""

import logging
from collections.abc import Callable
from typing import Optional

from toolport.config.schema import Config
from toolport.memory.store import MemoryStore
from toolport.security.sandbox import PathGuard, SandboxExecutor
from toolport.tools.base import Tool
from toolport.tools.builtin import clock, file, git, http, memory, rules, system
from toolport.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


def builtin_tools(
    config: Config,
    memory_store: MemoryStore,
    guard: PathGuard,
    sandbox: SandboxExecutor,
) -> dict[str, list[Tool]]:
    """Instantiate every built-in tool, keyed by group name.

    Args:
        config: Loaded configuration
        memory_store: Store shared by the memory tools
        guard: Path containment shared by filesystem, git and rules tools
        sandbox: Executor used by run_command

    Returns:
        Mapping of group name to tools, in registration order
    """
    return {
        "filesystem": [
            file.ReadFileTool(guard),
            file.WriteFileTool(guard),
            file.ListDirectoryTool(guard),
            file.FileInfoTool(guard),
            file.SearchFilesTool(guard),
        ],
        "git": [
            git.GitStatusTool(guard),
            git.GitLogTool(guard),
            git.GitDiffTool(guard),
            git.GitBranchTool(guard),
            git.GitShowTool(guard),
            git.GitRemoteTool(guard),
            git.GitBlameTool(guard),
        ],
        "fetch": [
            http.HttpGetTool(config.fetch),
            http.HttpPostTool(config.fetch),
            http.CheckUrlTool(config.fetch),
            http.FetchWebpageTool(config.fetch),
        ],
        "memory": [
            memory.MemorySetTool(memory_store),
            memory.MemoryGetTool(memory_store),
            memory.MemoryDeleteTool(memory_store),
            memory.MemoryListTool(memory_store),
            memory.MemorySearchTool(memory_store),
            memory.MemoryClearTool(memory_store),
            memory.MemoryAppendTool(memory_store),
            memory.MemoryStatsTool(memory_store),
        ],
        "system": [
            system.SystemInfoTool(),
            system.GetEnvTool(),
            system.ListEnvTool(),
            system.RunCommandTool(sandbox, config.security.commands),
            system.CalculateHashTool(),
            system.RandomGenerateTool(),
            system.Base64Tool(),
            system.JsonFormatTool(),
        ],
        "time": [
            clock.GetCurrentTimeTool(),
            clock.ConvertTimezoneTool(),
            clock.TimeDifferenceTool(),
            clock.FormatTimeTool(),
            clock.ListTimezonesTool(),
        ],
        "rules": [
            rules.RulesListTool(guard, config.rules.rules_dir),
            rules.RulesGetTool(guard, config.rules.rules_dir),
            rules.RulesSearchTool(guard, config.rules.rules_dir),
            rules.RulesByCategoryTool(guard, config.rules.rules_dir),
            rules.RulesCategoriesTool(guard, config.rules.rules_dir),
        ],
    }


def register_builtin_tools(
    registry: ToolRegistry,
    config: Config,
    memory_store: Optional[MemoryStore] = None,
    guard: Optional[PathGuard] = None,
    sandbox: Optional[SandboxExecutor] = None,
) -> int:
    """Register the built-in tools enabled by configuration.

    Groups not listed in ``config.tools.groups`` and names listed in
    ``config.tools.disabled`` are skipped.

    Args:
        registry: ToolRegistry to register tools in
        config: Loaded configuration
        memory_store: Store for memory tools (a fresh one when omitted)
        guard: Path guard (built from ``config.security`` when omitted)
        sandbox: Command executor (built from ``config.security`` when omitted)

    Returns:
        Number of tools registered

    Raises:
        DuplicateToolError: If a name is already taken in ``registry``
    """
    guard = guard or PathGuard.from_config(config.security)
    sandbox = sandbox or SandboxExecutor.from_config(config.security, path_guard=guard)
    memory_store = memory_store if memory_store is not None else MemoryStore()

    disabled = set(config.tools.disabled)
    count = 0
    for group, tools in builtin_tools(config, memory_store, guard, sandbox).items():
        if group not in config.tools.groups:
            logger.debug(f"Tool group disabled: {group}")
            continue
        for tool in tools:
            if tool.name in disabled:
                logger.debug(f"Tool disabled: {tool.name}")
                continue
            registry.register_tool(tool)
            count += 1

    logger.info(f"Registered {count} built-in tools")
    return count


def build_registry(
    config: Optional[Config] = None,
    memory_store: Optional[MemoryStore] = None,
    extra: Optional[Callable[[ToolRegistry], None]] = None,
) -> ToolRegistry:
    """Create and fill the registry used for the lifetime of a server.

    Args:
        config: Loaded configuration (defaults when omitted)
        memory_store: Store for memory tools
        extra: Hook to register additional tools after the built-ins

    Returns:
        Populated ToolRegistry
    """
    registry = ToolRegistry()
    register_builtin_tools(registry, config or Config(), memory_store=memory_store)
    if extra is not None:
        extra(registry)
    return registry
