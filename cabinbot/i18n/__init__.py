"""Message catalogue for cabinbot.

Strings are kept in ``<locale>.yaml`` next to this module as nested
mappings. They are flattened once at import into dotted keys, so
``dashboard.now_playing`` names ``now_playing`` under ``dashboard``.
"""

from collections.abc import Mapping
from pathlib import Path

import yaml

DEFAULT_LOCALE = "en"
CATALOGUE_DIR = Path(__file__).parent


def flatten(tree: Mapping, prefix: str = "") -> dict[str, str]:
    """Flatten nested YAML mappings into ``{"a.b.c": text}``.

    Non-string leaves (numbers, lists) are dropped.
    """
    flat: dict[str, str] = {}
    for name, node in tree.items():
        key = f"{prefix}{name}"
        if isinstance(node, Mapping):
            flat.update(flatten(node, f"{key}."))
        elif isinstance(node, str):
            flat[key] = node
    return flat


def load_catalogue(locale: str = DEFAULT_LOCALE, directory: Path = CATALOGUE_DIR) -> dict[str, str]:
    """Read and flatten one locale file. A missing file yields no messages."""
    path = directory / f"{locale}.yaml"
    if not path.is_file():
        return {}
    with path.open(encoding="utf-8") as f:
        return flatten(yaml.safe_load(f) or {})


_messages = load_catalogue()


def t(key: str, **kwargs: object) -> str:
    """Format the message stored under ``key``.

    An unknown key comes back unchanged. A template naming a placeholder
    that was not passed is returned unformatted.
    """
    template = _messages.get(key)
    if template is None:
        return key
    try:
        return template.format(**kwargs)
    except KeyError:
        return template
