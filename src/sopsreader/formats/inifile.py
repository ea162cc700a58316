"""INI adapter: sops metadata lives in a flattened ``[sops]`` section."""

from __future__ import annotations

import configparser
from typing import Any

from sopsreader.exceptions import DocumentParseError, MissingSopsSectionError
from sopsreader.formats.flattened import construct_document
from sopsreader.models import SopsDocument

#: Section holding the flattened metadata.
SOPS_SECTION = "sops"

# SOPS writes [DEFAULT] as an ordinary section; keep configparser from
# merging its keys into every other section.
_NO_DEFAULT_SECTION = "\x00"

# Holds the keys written before the first section header.
_ROOT_SECTION = "\x01"


def _nest_section(data: dict[str, Any], name: str, values: dict[str, str]) -> None:
    """Store a section under its dotted name, ``[a.b]`` as ``data["a"]["b"]``."""
    target = data
    parts = name.split(".")
    for depth, part in enumerate(parts):
        child = target.setdefault(part, {})
        if not isinstance(child, dict):
            conflict = ".".join(parts[: depth + 1])
            raise DocumentParseError("ini", f"section [{name}] conflicts with key {conflict!r}")
        target = child
    for key, value in values.items():
        if isinstance(target.get(key), dict):
            raise DocumentParseError("ini", f"key {key!r} in [{name}] conflicts with a subsection")
        target[key] = value


def parse_ini(text: str) -> SopsDocument:
    """Parse a SOPS ini document.

    Keys before the first section header are top-level data. Every other
    section except ``[sops]`` becomes a nested mapping; dotted section
    names nest further (``[db.primary]`` is ``{"db": {"primary": ...}}``).
    Values are kept as strings; key case is preserved.

    Args:
        text: INI source.

    Returns:
        The validated SopsDocument.

    Raises:
        DocumentParseError: If the text is not valid INI, or a section
            name collides with a plain key.
        MissingSopsSectionError: If there is no ``[sops]`` section.
        SchemaError: If the rebuilt metadata is incomplete.

    Examples:
        >>> doc = parse_ini("[db.primary]\\nhost = a\\n[sops]\\n")  # doctest: +SKIP
        >>> doc.data  # doctest: +SKIP
        {'db': {'primary': {'host': 'a'}}}
    """
    parser = configparser.ConfigParser(
        interpolation=None,
        default_section=_NO_DEFAULT_SECTION,
        strict=False,
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        parser.read_string(f"[{_ROOT_SECTION}]\n{text}")
    except configparser.Error as exc:
        raise DocumentParseError("ini", str(exc)) from exc

    if not parser.has_section(SOPS_SECTION):
        raise MissingSopsSectionError("ini")

    data: dict[str, Any] = dict(parser.items(_ROOT_SECTION, raw=True))
    for name in parser.sections():
        if name in (_ROOT_SECTION, SOPS_SECTION):
            continue
        _nest_section(data, name, dict(parser.items(name, raw=True)))

    sops = dict(parser.items(SOPS_SECTION, raw=True))
    return construct_document(data, sops)


__all__ = ["SOPS_SECTION", "parse_ini"]
