"""Reader for the ssh-keygen ``allowed_signers`` registry format."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sshsign.errors import MalformedRegistryLine

logger = logging.getLogger(__name__)

_KEY_TYPE_PREFIXES = ("ssh-", "ecdsa-", "sk-")


@dataclass(frozen=True, slots=True)
class AllowedSigner:
    """One registry entry: an identity and its ``"<key-type> <base64>"`` key line."""

    email: str
    public_key: str


def _key_index(tokens: list[str]) -> int:
    # An options field (e.g. namespaces="git") may sit between identity and key.
    for index in range(1, len(tokens) - 1):
        if tokens[index].startswith(_KEY_TYPE_PREFIXES):
            return index
    return 1


def parse_allowed_signers(
    source: str | Iterable[str], *, strict: bool = True
) -> list[AllowedSigner]:
    """Parse registry text into signers, preserving order and duplicates.

    Blank lines and ``#`` comments are ignored. A line with fewer than three
    tokens raises :class:`MalformedRegistryLine` when ``strict``; otherwise it
    is skipped with a warning.

    Args:
        source: Registry contents, or an iterable of its lines
        strict: Fail the whole parse on the first malformed line

    Returns:
        Allowed signers in registry order
    """
    lines = source.splitlines() if isinstance(source, str) else source

    signers: list[AllowedSigner] = []
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        tokens = stripped.split()
        if len(tokens) < 3:
            if strict:
                raise MalformedRegistryLine(line_number, line)
            logger.warning("Skipping malformed allowed signers line %d", line_number)
            continue

        index = _key_index(tokens)
        signers.append(
            AllowedSigner(
                email=tokens[0],
                public_key=f"{tokens[index]} {tokens[index + 1]}",
            )
        )

    logger.debug("Parsed %d allowed signers", len(signers))
    return signers
