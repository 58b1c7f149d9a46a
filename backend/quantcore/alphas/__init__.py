"""Alpha signal plugin system.

Public API:
- register_alpha: Decorator to register an alpha function
- get_alpha: Resolve an alpha function by name
- list_alphas: Discover all registered alphas
- SignalGenerator: Turns price history into named AlphaSignals

Importing this package auto-registers all built-in alphas.
"""

from quantcore.alphas.registry import (
    AlphaFunction,
    get_alpha,
    list_alphas,
    register_alpha,
)

# Import built-in alphas to trigger auto-registration
import quantcore.alphas.builtin  # noqa: F401
from quantcore.alphas.generator import (
    DEFAULT_ALPHAS,
    MIN_HISTORY_BARS,
    SignalGenerator,
    clamp_score,
)

__all__ = [
    "AlphaFunction",
    "DEFAULT_ALPHAS",
    "MIN_HISTORY_BARS",
    "SignalGenerator",
    "clamp_score",
    "get_alpha",
    "list_alphas",
    "register_alpha",
]
