"""Default developer roster used to seed an empty PI."""
from decimal import Decimal

import structlog

from pi_planning.schemas.planning import Developer

logger = structlog.get_logger(__name__)

DEFAULT_ROSTER: dict[str, tuple[str, ...]] = {
    "Tungsten": ("JRE", "DKA", "LRU", "RGA", "LOR", "OMO"),
    "Neon": ("BRO", "MPL", "LBU", "RTH", "IWI", "STH"),
    "H1": ("TSC", "GRO", "MBR", "PSC", "SFR", "DMA", "VNA", "RBU"),
    "Zn2C": ("JEI", "YHU", "PNI", "VTS", "PSA", "MMA", "LMA", "RSA", "NAC"),
    "UI": ("KFI", "SOL"),
    "TMGT": ("JDE", "VSC"),
    "Admin": ("CIR", "MVA", "NRA", "BAS", "DGR", "RBL", "LSO"),
}

DEFAULT_PROFILE = {
    "stack": "Fullstack",
    "daily_hours": Decimal(8),
    "work_ratio": Decimal(100),
    "internal_cost": Decimal(100),
    "load": Decimal(90),
    "manage_ratio": Decimal(0),
    "develop_ratio": Decimal(80),
    "maintain_ratio": Decimal(20),
    "velocity": Decimal(1),
}


def default_developer(key: str, team: str, pi: str) -> Developer:
    return Developer(key=key, team=team, name=key, pi=pi, **DEFAULT_PROFILE)


def missing_default_developers(pi: str, existing: list[Developer]) -> list[Developer]:
    """Roster developers not yet present in the PI. Existing profiles are left alone."""
    present = {d.key for d in existing}
    missing = [
        default_developer(key, team, pi)
        for team, keys in DEFAULT_ROSTER.items()
        for key in keys
        if key not in present
    ]
    if missing:
        logger.info("roster_defaults_missing", pi=pi, count=len(missing))
    return missing
