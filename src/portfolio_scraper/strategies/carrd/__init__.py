"""Carrd strategy package.

Extracts artwork and artist metadata from sites built with the Carrd site
builder: ``{name}.carrd.co``, ``{name}.crd.co`` and custom domains pointed at
Carrd.  A site is a single static HTML page split into anchored sections, so
``https://name.carrd.co/#gallery`` and ``https://name.carrd.co/#about`` are
two "pages" served by one document.

Three input kinds are accepted:

- **Asset URL** (``/assets/images/gallery01/1a19b400.jpg?v=...``): a single
  media item; with a same-site referer the referring section supplies the
  commentary.
- **Page URL** (``/#portfolio``): every media item in that section plus its
  text as DText commentary.
- **Profile URL** (bare site root): every media item on the site.

See also:
    - URL rules: :mod:`~portfolio_scraper.strategies.carrd.urls`
    - Gallery walk: :mod:`~portfolio_scraper.strategies.carrd.gallery`
    - ``_original`` variant probing: :mod:`~portfolio_scraper.strategies.carrd.resolver`
    - Commentary: :mod:`~portfolio_scraper.strategies.carrd.commentary`
    - Strategy: :class:`~portfolio_scraper.strategies.carrd.strategy.CarrdStrategy`
"""

from __future__ import annotations
