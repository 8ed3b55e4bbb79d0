"""Strategy registry for dynamic discovery and registration of extractors.

Strategies register themselves on import using the ``@register`` decorator.
The registry is a module-level singleton that maps ``platform_name`` strings
to ``ExtractionStrategy`` subclasses.  Routing a URL to a strategy is done by
host: :func:`find_strategy` asks each registered strategy whether it handles
the URL's host, so no per-platform branching lives outside the strategies.

Example — registering a strategy::

    from portfolio_scraper.strategies.registry import register
    from portfolio_scraper.strategies.base import ExtractionStrategy

    @register
    class CarrdStrategy(ExtractionStrategy):
        platform_name = "carrd"
        ...

Example — routing a URL::

    from portfolio_scraper.strategies.registry import autodiscover, find_strategy

    autodiscover()
    cls = find_strategy("https://name.carrd.co/#home")
    result = await cls(fetcher).extract("https://name.carrd.co/#home")
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from typing import TYPE_CHECKING

from portfolio_scraper.config.settings import Settings, get_settings

if TYPE_CHECKING:
    from portfolio_scraper.strategies.base import ExtractionStrategy

logger = logging.getLogger(__name__)

# Registry singleton: platform_name -> ExtractionStrategy subclass
_REGISTRY: dict[str, type[ExtractionStrategy]] = {}


def register(cls: type[ExtractionStrategy]) -> type[ExtractionStrategy]:
    """Decorator that registers an ``ExtractionStrategy`` subclass in the global registry.

    If a strategy with the same ``platform_name`` is already registered, the
    new registration overwrites the old one and a warning is emitted.

    Args:
        cls: ``ExtractionStrategy`` subclass to register.

    Returns:
        The same class (decorator pass-through).

    Raises:
        AttributeError: If ``cls`` does not define ``platform_name``.
    """
    platform_name: str = cls.platform_name
    if platform_name in _REGISTRY:
        logger.warning(
            "Platform '%s' is already registered (was %s). Overwriting with %s.",
            platform_name,
            _REGISTRY[platform_name].__qualname__,
            cls.__qualname__,
        )
    _REGISTRY[platform_name] = cls
    logger.debug(
        "Registered extraction strategy: platform=%s class=%s",
        platform_name,
        cls.__qualname__,
    )
    return cls


def get_strategy(platform_name: str) -> type[ExtractionStrategy]:
    """Retrieve a registered strategy class by platform name.

    Args:
        platform_name: The ``platform_name`` class attribute to look up.

    Returns:
        The ``ExtractionStrategy`` subclass registered under *platform_name*.

    Raises:
        KeyError: If no strategy with that name is registered.
    """
    try:
        return _REGISTRY[platform_name]
    except KeyError:
        registered = sorted(_REGISTRY.keys())
        raise KeyError(
            f"No strategy registered for platform '{platform_name}'. "
            f"Registered platforms: {registered}. "
            "Did you forget to call autodiscover() or import the strategy module?"
        ) from None


def find_strategy(
    url: str,
    referer: str | None = None,
    settings: Settings | None = None,
) -> type[ExtractionStrategy] | None:
    """Return the strategy class that handles *url*, or ``None``.

    The URL's own host is tried first against every registered strategy;
    if none claims it, the referer's host is tried.  A bare asset on a
    custom domain is thus routed correctly when the page it came from is
    known to the platform.  Failing both, a referer on the URL's own host
    is offered to each strategy's ``handles_same_site`` so an unconfigured
    custom domain still reaches the strategy that recognises it per call.

    Args:
        url: URL to route.
        referer: Optional page the URL was found on.
        settings: Settings passed to the host checks (custom domains).

    Returns:
        The first matching strategy class in ``platform_name`` order.
    """
    resolved_settings = settings or get_settings()
    candidates = [url] + ([referer] if referer else [])
    for candidate in candidates:
        for name in sorted(_REGISTRY):
            cls = _REGISTRY[name]
            if cls.handles_host_of(candidate, resolved_settings):
                return cls
    if referer:
        for name in sorted(_REGISTRY):
            cls = _REGISTRY[name]
            if cls.handles_same_site(url, referer, resolved_settings):
                return cls
    logger.debug("No strategy handles %s (referer=%s)", url, referer)
    return None


def list_strategies() -> list[dict[str, str]]:
    """Return metadata for all registered strategies, ordered by ``platform_name``.

    Returns:
        List of dicts with ``platform_name``, ``description`` and
        ``strategy_class`` (fully qualified class name, for debugging).
    """
    return [
        {
            "platform_name": cls.platform_name,
            "description": cls.description,
            "strategy_class": f"{cls.__module__}.{cls.__qualname__}",
        }
        for cls in sorted(_REGISTRY.values(), key=lambda c: c.platform_name)
    ]


def autodiscover() -> None:
    """Import all ``strategy`` modules to trigger ``@register`` decorators.

    Walks the ``portfolio_scraper.strategies`` package tree and imports every
    submodule named ``strategy``.  Idempotent.  A module that fails to import
    is logged and skipped so other strategies still load.
    """
    import portfolio_scraper.strategies as strategies_pkg

    strategies_path = strategies_pkg.__path__
    strategies_prefix = strategies_pkg.__name__ + "."

    for _finder, module_name, _is_pkg in pkgutil.walk_packages(
        path=strategies_path, prefix=strategies_prefix
    ):
        if module_name.endswith(".strategy"):
            try:
                importlib.import_module(module_name)
                logger.debug("Autodiscovered strategy module: %s", module_name)
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Failed to import strategy module '%s': %s",
                    module_name,
                    exc,
                    exc_info=True,
                )
