"""Parsing of lane feed records.

A feed line has the form ``type,direction,speed``. Type and direction may be
given by name or by their integer code (enum order), e.g. ``3,2,3.5`` is a
fire truck on the east approach. The speed column is validated but cruise
speeds always come from configuration.
"""
import logging
from typing import Iterable, List, Optional, Tuple
from pydantic import BaseModel
from junction.domain.models import Direction, VehicleType

logger = logging.getLogger(__name__)


class FeedRecordError(ValueError):
    pass


class FeedRecord(BaseModel):
    type: VehicleType
    direction: Direction
    speed: float


def _parse_enum(enum_cls, raw: str, field: str):
    members = list(enum_cls)
    raw = raw.strip()
    if raw.lstrip("-").isdigit():
        index = int(raw)
        if 0 <= index < len(members):
            return members[index]
        raise FeedRecordError(f"{field} code {index} out of range")
    try:
        return enum_cls(raw.upper())
    except ValueError:
        raise FeedRecordError(f"unknown {field} {raw!r}")


def parse_record(line: str) -> Optional[FeedRecord]:
    """Parse one line; ``None`` for blank lines and comments."""
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    fields = line.split(",")
    if len(fields) != 3:
        raise FeedRecordError(f"expected 3 fields, got {len(fields)}")

    vehicle_type = _parse_enum(VehicleType, fields[0], "vehicle type")
    direction = _parse_enum(Direction, fields[1], "direction")
    try:
        speed = float(fields[2])
    except ValueError:
        raise FeedRecordError(f"invalid speed {fields[2].strip()!r}")
    if not speed > 0:
        raise FeedRecordError(f"speed must be positive, got {speed}")

    return FeedRecord(type=vehicle_type, direction=direction, speed=speed)


def read_feed(lines: Iterable[str]) -> Tuple[List[FeedRecord], int]:
    """Parse a batch, skipping malformed records. Returns (records, skipped)."""
    records: List[FeedRecord] = []
    skipped = 0
    for number, line in enumerate(lines, start=1):
        try:
            record = parse_record(line)
        except FeedRecordError as e:
            logger.warning("Skipping feed line %d (%r): %s", number, line.strip(), e)
            skipped += 1
            continue
        if record is not None:
            records.append(record)
    return records, skipped
