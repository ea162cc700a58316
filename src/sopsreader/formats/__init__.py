"""Format adapters turning env/ini/json/yaml text into a SopsDocument.

The adapter is picked from an explicit file type when given, otherwise
from the file extension.

Examples:
    >>> from sopsreader.formats import detect_format
    >>> detect_format("secrets.enc.yml")
    'yaml'
    >>> doc = load_document("secrets.env")  # doctest: +SKIP
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Literal

from sopsreader.exceptions import UnsupportedFormatError
from sopsreader.formats.envfile import parse_env
from sopsreader.formats.flattened import construct_document, rebuild_age_recipients
from sopsreader.formats.inifile import parse_ini
from sopsreader.formats.jsonfile import parse_json
from sopsreader.formats.yamlfile import parse_yaml
from sopsreader.models import SopsDocument, validate_document

log = logging.getLogger(__name__)

FileType = Literal["env", "ini", "json", "yaml"]

#: Parser for each supported file type.
PARSERS: dict[str, Callable[[str], SopsDocument]] = {
    "env": parse_env,
    "ini": parse_ini,
    "json": parse_json,
    "yaml": parse_yaml,
}

#: File extension to file type mapping.
EXTENSIONS: dict[str, str] = {
    ".env": "env",
    ".ini": "ini",
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}

#: Extensions advertised in error messages.
SUPPORTED_EXTENSIONS = (".env", ".ini", ".json", ".yaml")


def detect_format(path: str | Path) -> str:
    """Return the file type implied by a path's extension.

    Raises:
        UnsupportedFormatError: If the extension is missing or unknown.
    """
    suffix = Path(path).suffix.lower()
    try:
        return EXTENSIONS[suffix]
    except KeyError:
        raise UnsupportedFormatError(suffix, SUPPORTED_EXTENSIONS) from None


def parse_text(text: str, file_type: str) -> SopsDocument:
    """Parse document text with the adapter for ``file_type``.

    Raises:
        UnsupportedFormatError: If ``file_type`` is not a known type.
    """
    try:
        parser = PARSERS[file_type]
    except KeyError:
        raise UnsupportedFormatError(file_type, SUPPORTED_EXTENSIONS) from None
    return parser(text)


def load_document(
    source: str | Path | Mapping[str, Any],
    file_type: FileType | str | None = None,
) -> SopsDocument:
    """Load a SOPS document from a file or an already-parsed mapping.

    Args:
        source: Path to a UTF-8 file, or a decoded json/yaml mapping.
        file_type: Explicit type (``env``, ``ini``, ``json``, ``yaml``).
            Inferred from the extension when omitted.

    Returns:
        The validated SopsDocument.

    Raises:
        UnsupportedFormatError: If no adapter matches, or a mapping is
            given with a flat file type.
        OSError: If the file cannot be read.
    """
    if isinstance(source, Mapping):
        if file_type not in (None, "json", "yaml"):
            raise UnsupportedFormatError(str(file_type), (".json", ".yaml"))
        return validate_document(source)

    path = Path(source)
    if file_type is None:
        file_type = detect_format(path)
    elif file_type not in PARSERS:
        raise UnsupportedFormatError(file_type, SUPPORTED_EXTENSIONS)

    log.debug("Loading %s as %s", path, file_type)
    document = parse_text(path.read_text(encoding="utf-8"), file_type)
    log.debug("Loaded %s with %d recipient(s)", path, len(document.metadata.age))
    return document


__all__ = [
    "EXTENSIONS",
    "PARSERS",
    "SUPPORTED_EXTENSIONS",
    "FileType",
    "construct_document",
    "detect_format",
    "load_document",
    "parse_env",
    "parse_ini",
    "parse_json",
    "parse_text",
    "parse_yaml",
    "rebuild_age_recipients",
]
