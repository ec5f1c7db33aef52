"""Extension layer — lifecycle hooks via pluggy.

Discovery: ``verproxy.plugins`` entry points and local single-file plugins.
INVARIANT: Plugin failures are warnings, never errors.
"""

from verproxy.plugins.manager import PluginManager, hookimpl

__all__ = ["PluginManager", "hookimpl"]
