"""License banner rendering for bundled artifacts."""

from __future__ import annotations

from datetime import datetime

from jinja2 import Environment, StrictUndefined

from .config import BannerInfo

_BANNER_TEMPLATE = """\
/*!
  * {{ info.title }}{{ " " ~ filename if filename else "" }} v{{ info.version }}{{ " (" ~ info.homepage ~ ")" if info.homepage else "" }}
{% if info.author %}
  * Copyright {{ years }} {{ info.author }}
{% endif %}
{% if info.license %}
  * Licensed under {{ info.license }}
{% endif %}
  */"""

_env = Environment(autoescape=False, trim_blocks=True, undefined=StrictUndefined)
_template = _env.from_string(_BANNER_TEMPLATE)


def render_banner(filename: str | None, info: BannerInfo, *, year: int | None = None) -> str:
    """Return the ``/*! ... */`` comment block placed at the top of an artifact."""
    current = year if year is not None else datetime.now().year
    if info.start_year and info.start_year < current:
        years = f"{info.start_year}-{current}"
    else:
        years = str(current)
    return _template.render(info=info, filename=filename, years=years)


__all__ = ["render_banner"]
