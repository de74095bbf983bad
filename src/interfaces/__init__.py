"""Public interface definitions for external collaborators.

Every backend the search pipeline talks to is reached through one of these
abstract base classes.  Concrete adapters live in ``src/providers/`` and are
wired together in ``src/main.py``; tests inject mocks built with
``MagicMock(spec=...)`` against the same interfaces.

CONCRETE PROVIDER MAP:
    Interface                 ->  Concrete implementations (in src/providers/)
    ---------------------------------------------------------------------
    IEventProvider            ->  RapidAPIEventProvider
    IFallbackSearchBackend    ->  HTTPFallbackSearchBackend
    ICacheProvider            ->  MemoryCacheProvider
"""

from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.event_provider import IEventProvider
from src.interfaces.fallback_backend import IFallbackSearchBackend

__all__ = [
    "ICacheProvider",
    "IEventProvider",
    "IFallbackSearchBackend",
]
