"""Routine and block models.

A routine is an ordered, named sequence of timed blocks.  Both types are
frozen dataclasses: every structural edit returns a new ``Routine`` and
the running session keeps the snapshot it was started with.

``total_duration`` is derived from the blocks on every access, so it can
never drift from the sum of the block durations.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from ..errors import InvalidRoutine


class BlockKind(Enum):
    PREP = "PREP"
    WORK = "WORK"
    REST = "REST"
    OTHER = "OTHER"


DEFAULT_BLOCK_NAME = "New block"
DEFAULT_BLOCK_DURATION = 60  # seconds


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Block:
    """One timed phase of a routine."""

    name: str
    duration: int  # seconds, > 0
    kind: BlockKind = BlockKind.WORK
    id: str = field(default_factory=generate_id)

    def __post_init__(self) -> None:
        if isinstance(self.duration, bool) or not isinstance(self.duration, int):
            raise ValueError(
                f"block duration must be an integer, got {type(self.duration).__name__}"
            )
        if self.duration <= 0:
            raise ValueError(f"block duration must be positive, got {self.duration}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "duration": self.duration,
            "kind": self.kind.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Block:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            duration=int(data["duration"]),
            kind=BlockKind(data.get("kind", BlockKind.WORK.value)),
        )


def new_block(
    name: str = DEFAULT_BLOCK_NAME,
    duration: int = DEFAULT_BLOCK_DURATION,
    kind: BlockKind = BlockKind.WORK,
) -> Block:
    """The block an editor appends when the user taps "add"."""
    return Block(name=name, duration=duration, kind=kind)


@dataclass(frozen=True)
class Routine:
    """A reusable, ordered collection of blocks."""

    name: str
    blocks: tuple[Block, ...] = ()
    id: str = field(default_factory=generate_id)
    last_played: datetime | None = None

    def __post_init__(self) -> None:
        # Accept any sequence but always store a tuple
        if not isinstance(self.blocks, tuple):
            object.__setattr__(self, "blocks", tuple(self.blocks))

    # ── derived ───────────────────────────────────────────────────────

    @property
    def total_duration(self) -> int:
        """Sum of all block durations, in seconds."""
        return sum(b.duration for b in self.blocks)

    @property
    def block_count(self) -> int:
        return len(self.blocks)

    def index_of(self, block_id: str) -> int:
        for i, block in enumerate(self.blocks):
            if block.id == block_id:
                return i
        raise KeyError(block_id)

    # ── structural edits ──────────────────────────────────────────────

    def renamed(self, name: str) -> Routine:
        return replace(self, name=name)

    def with_block_added(self, block: Block) -> Routine:
        return replace(self, blocks=self.blocks + (block,))

    def with_block_inserted(self, index: int, block: Block) -> Routine:
        blocks = list(self.blocks)
        blocks.insert(index, block)
        return replace(self, blocks=tuple(blocks))

    def with_block_updated(self, block_id: str, **changes) -> Routine:
        """Replace fields on one block (``name``, ``duration``, ``kind``)."""
        changes.pop("id", None)
        idx = self.index_of(block_id)
        blocks = list(self.blocks)
        blocks[idx] = replace(blocks[idx], **changes)
        return replace(self, blocks=tuple(blocks))

    def with_block_removed(self, block_id: str) -> Routine:
        return replace(
            self, blocks=tuple(b for b in self.blocks if b.id != block_id),
        )

    def with_block_moved(self, index: int, direction: int) -> Routine:
        """Swap the block at *index* with its neighbour (-1 up, +1 down).

        Moving the first block up or the last block down is a no-op.
        """
        target = index + direction
        if direction not in (-1, 1) or not (0 <= index < len(self.blocks)):
            return self
        if not (0 <= target < len(self.blocks)):
            return self
        blocks = list(self.blocks)
        blocks[index], blocks[target] = blocks[target], blocks[index]
        return replace(self, blocks=tuple(blocks))

    def with_block_duplicated(self, block_id: str) -> Routine:
        """Insert a copy (with a fresh id) right after the original."""
        idx = self.index_of(block_id)
        copy = replace(self.blocks[idx], id=generate_id())
        return self.with_block_inserted(idx + 1, copy)

    def played_at(self, when: datetime) -> Routine:
        return replace(self, last_played=when)

    # ── serialization ─────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "total_duration": self.total_duration,
            "blocks": [b.to_dict() for b in self.blocks],
            "last_played": (
                self.last_played.isoformat() if self.last_played else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Routine:
        # Stored total_duration is informational only; it is always derived.
        last_played = data.get("last_played")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            blocks=tuple(Block.from_dict(b) for b in data.get("blocks", [])),
            last_played=(
                datetime.fromisoformat(last_played) if last_played else None
            ),
        )


def validate_for_save(routine: Routine) -> None:
    """Reject routines that can't be stored: blank name or no blocks."""
    if not routine.name or not routine.name.strip():
        raise InvalidRoutine("routine name must not be blank")
    if not routine.blocks:
        raise InvalidRoutine(f"routine {routine.name!r} has no blocks")
