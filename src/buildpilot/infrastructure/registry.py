"""
Sandbox Registry with Entry Points Discovery.

Provides dynamic sandbox loading via Python entry points (buildpilot.sandboxes group).
External packages can register sandboxes in their pyproject.toml:

    [project.entry-points."buildpilot.sandboxes"]
    docker = "mypackage.sandboxes:DockerSandbox"
"""

import warnings
from importlib.metadata import entry_points
from typing import Any

from buildpilot.domain.interfaces import SandboxInterface


class SandboxRegistry:
    """
    Registry for SandboxInterface implementations.

    Discovers sandboxes via the 'buildpilot.sandboxes' entry point group.
    Uses lazy loading - entry points are only loaded on first access.

    Example usage:
        sandbox = SandboxRegistry.create("local", workdir="./preview")
    """

    _sandboxes: dict[str, type[SandboxInterface]] = {}
    _loaded: bool = False

    @classmethod
    def _load_entry_points(cls) -> None:
        """Load sandboxes from entry points (lazy, called once)."""
        if cls._loaded:
            return

        for ep in entry_points(group="buildpilot.sandboxes"):
            if ep.name in cls._sandboxes:
                continue
            try:
                cls._sandboxes[ep.name] = ep.load()
            except Exception as e:
                warnings.warn(
                    f"Failed to load sandbox '{ep.name}' from entry point: {e}",
                    stacklevel=2,
                )

        cls._loaded = True

    @classmethod
    def register(cls, name: str, sandbox_class: type[SandboxInterface]) -> None:
        """
        Manually register a sandbox class.

        Args:
            name: Sandbox identifier (e.g., "local")
            sandbox_class: Class implementing SandboxInterface
        """
        cls._sandboxes[name] = sandbox_class

    @classmethod
    def get(cls, name: str) -> type[SandboxInterface]:
        """
        Get a sandbox class by name.

        Raises:
            KeyError: If sandbox not found
        """
        cls._load_entry_points()
        if name not in cls._sandboxes:
            available = ", ".join(sorted(cls._sandboxes)) or "(none)"
            raise KeyError(f"Sandbox '{name}' not found. Available sandboxes: {available}")
        return cls._sandboxes[name]

    @classmethod
    def create(cls, name: str, **config: Any) -> SandboxInterface:
        """
        Create a sandbox instance by name.

        Args:
            name: Sandbox identifier
            **config: Keyword arguments for the sandbox constructor

        Raises:
            KeyError: If sandbox not found
            TypeError: If config doesn't match constructor signature
        """
        sandbox_class = cls.get(name)
        return sandbox_class(**config)

    @classmethod
    def available(cls) -> list[str]:
        """List available sandbox names."""
        cls._load_entry_points()
        return sorted(cls._sandboxes)

    @classmethod
    def clear(cls) -> None:
        """
        Clear all registered sandboxes (useful for testing).

        Also resets the loaded flag so entry points can be reloaded.
        """
        cls._sandboxes.clear()
        cls._loaded = False


def _register_builtins() -> None:
    # Built-ins stay available when the package is used without being installed
    from buildpilot.infrastructure.sandbox import InMemorySandbox, LocalSandbox

    SandboxRegistry.register("local", LocalSandbox)
    SandboxRegistry.register("memory", InMemorySandbox)


_register_builtins()
