"""ID generation matching Droip's ID patterns.

Droip uses short lowercase alphanumeric IDs:
- element IDs: "dp" + 6 chars (e.g. "dp7azz8i")
- style block IDs: "<prefix>_dp" + 6 chars (e.g. "mcpbr_dp3vqhil")
- symbolElPropIds: "sep" + 7 chars (e.g. "sepj9r513")

IDs are drawn from `secrets`, not `random`: they double as references that get
shared across a site's whole symbol corpus.

Known limitation: there is no uniqueness check. With 36^6 (~2.2 billion)
possible element suffixes, the birthday bound puts a 50% collision chance at
roughly 55,000 IDs. Callers that need hard uniqueness must check the target
map before inserting.
"""

import secrets

ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
DEFAULT_STYLE_PREFIX = "mcpbr"


def _random_string(length: int) -> str:
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def element_id(length: int = 6) -> str:
    """Generate an element ID (e.g. "dp7azz8i")."""
    return "dp" + _random_string(length)


def style_id(prefix: str = DEFAULT_STYLE_PREFIX, length: int = 6) -> str:
    """Generate a style block ID (e.g. "mcpbr_dp3vqhil")."""
    return f"{prefix}_dp" + _random_string(length)


def symbol_el_prop_id(length: int = 7) -> str:
    """Generate a symbolElPropId (e.g. "sepj9r513")."""
    return "sep" + _random_string(length)


def element_batch(count: int, length: int = 6) -> list[str]:
    """Generate `count` element IDs."""
    return [element_id(length) for _ in range(count)]


def style_batch(count: int, prefix: str = DEFAULT_STYLE_PREFIX, length: int = 6) -> list[str]:
    """Generate `count` style block IDs."""
    return [style_id(prefix, length) for _ in range(count)]
