"""Contract source loading."""

from __future__ import annotations

import logging
from pathlib import Path

from ..errors import ContractNotFoundError, ReadError

logger = logging.getLogger(__name__)


def load_contract(path: str | Path) -> str:
    """
    Read a Pact contract source file.

    The text is returned exactly as stored: no newline translation and
    no stripping.

    Raises:
        ContractNotFoundError: If the path does not exist
        ReadError: If the file cannot be read or is not UTF-8
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8", newline="") as f:
            source = f.read()
    except FileNotFoundError as exc:
        raise ContractNotFoundError(f"Contract file not found: {path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ReadError(f"Cannot read contract file {path}: {exc}") from exc

    logger.debug("Loaded contract %s (%d chars)", path, len(source))
    return source
