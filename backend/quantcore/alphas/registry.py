"""Alpha registry for discovering alpha functions by name.

Usage:
    @register_alpha("my_alpha")
    def my_alpha(bars: Sequence[PriceBar]) -> float | None:
        ...

    alpha = get_alpha("my_alpha")
    names = list_alphas()

An alpha takes oldest-first bars and returns a raw score, or None when the
history is too short to compute it. Scores are clamped by the caller.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from quantcore.models import PriceBar

logger = logging.getLogger(__name__)

AlphaFunction = Callable[[Sequence[PriceBar]], float | None]

# Global registry: alpha_name -> alpha function
_REGISTRY: dict[str, AlphaFunction] = {}


def register_alpha(name: str):
    """Register a scoring function as the alpha called ``name``.

    Names are first come, first served: the function registered first keeps
    the name.

    Raises:
        ValueError: If ``name`` already belongs to another alpha function.
    """

    def decorator(func: AlphaFunction) -> AlphaFunction:
        if name in _REGISTRY:
            existing = _REGISTRY[name]
            raise ValueError(
                f"Alpha name '{name}' is taken by {existing.__module__}.{existing.__name__}; "
                f"cannot register {func.__module__}.{func.__name__} under it"
            )
        _REGISTRY[name] = func
        logger.debug("Alpha %s scored by %s.%s", name, func.__module__, func.__name__)
        return func

    return decorator


def get_alpha(name: str) -> AlphaFunction:
    """Resolve an alpha name to its scoring function.

    Raises:
        KeyError: If the name is unknown; the message lists registered alphas.
    """
    func = _REGISTRY.get(name)
    if func is None:
        available = ", ".join(sorted(_REGISTRY.keys())) or "(none)"
        raise KeyError(f"No alpha registered as '{name}' (registered alphas: {available})")
    return func


def list_alphas() -> list[str]:
    """Return a sorted list of registered alpha names."""
    return sorted(_REGISTRY.keys())
