"""State layer.

Holds the diagnostics map that the relay writes on every significant
action and the debug channel reads on demand.
"""

from pdascan.state.debug import DebugState

__all__ = ["DebugState"]
