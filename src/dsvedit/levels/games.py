"""
Game detection from the cartridge header signature.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..errors import UnknownGameError

logger = logging.getLogger(__name__)

SIGNATURE_LENGTH = 12


@dataclass(frozen=True)
class GameProfile:
    """Supported game."""
    code: str
    title: str
    signature: bytes


GAME_PROFILES: dict[bytes, GameProfile] = {
    profile.signature: profile
    for profile in (
        GameProfile("dos", "Dawn of Sorrow", b"CASTLEVANIA1"),
        GameProfile("por", "Portrait of Ruin", b"CASTLEVANIA2"),
        GameProfile("ooe", "Order of Ecclesia", b"CASTLEVANIA3"),
    )
}


def detect_game(header_path: Path) -> GameProfile:
    """Identify the game from the first bytes of a ROM or header file.

    Args:
        header_path: ROM image or extracted ndsheader.bin

    Returns:
        Matching GameProfile

    Raises:
        UnknownGameError: If the signature is not a supported game
    """
    with open(header_path, "rb") as f:
        signature = f.read(SIGNATURE_LENGTH)

    profile = GAME_PROFILES.get(signature)
    if profile is None:
        raise UnknownGameError(f"Specified game is not a DSVania: {signature!r}")

    logger.debug(f"Detected {profile.title} from {header_path}")
    return profile
