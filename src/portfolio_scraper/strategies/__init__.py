"""Per-platform extraction strategies.

Sub-modules:
- ``base``     — ``ExtractionStrategy`` abstract base class
- ``registry`` — ``@register`` decorator, host-based routing and autodiscovery
- ``carrd``    — Carrd (``*.carrd.co``, ``*.crd.co`` and custom domains)
"""
