"""
Free-set maintenance: splitting free time when a reservation lands in it and
merging it back when the reservation goes away.

This is the core of the engine. The maintainer works on the free collection
owned by the ``Schedule`` and never touches the reserved one.
"""

import logging
from collections import defaultdict
from typing import Dict, List

from pendulum import Date

from .models import Appointment, Room, TimeRange
from .overlap import Relation, classify, dates_overlap

logger = logging.getLogger(__name__)


class FreeSetMaintainer:
    """
    Keeps the free collection consistent with reservations.

    Algorithm (add path):
    1. Select free candidates in the same room with the same day tag, dated
       within one day of the reservation's date range
    2. Classify each candidate's clock window against the reservation's
    3. Remove, shrink or split the candidate accordingly
    4. Remember the consumed pieces as the reservation's footprint

    The delete path hands the footprint back, growing touching neighbours
    and merging them so free intervals stay maximal.
    """

    def __init__(self, free: List[Appointment]):
        self._free = free
        self._footprints: Dict[Appointment, List[TimeRange]] = {}

    def candidates(self, target: Appointment) -> List[Appointment]:
        """
        Free appointments a reservation may split, or a deletion may merge into.

        The date window is one day wider than the target's date range on each
        side, inclusive.
        """
        window_start = target.time.start_date.subtract(days=1)
        window_end = target.time.end_date.add(days=1)

        return [
            free for free in self._free
            if free.room == target.room
            and free.time.day == target.time.day
            and window_start <= free.time.date <= window_end
        ]

    def footprint(self, reserved: Appointment) -> List[TimeRange]:
        """Return the free time a reservation consumed, one piece per date."""
        return list(self._footprints.get(reserved, []))

    def apply_reservation(self, reserved: Appointment) -> List[TimeRange]:
        """
        Carve a new reservation out of the free collection.

        Returns:
            The consumed pieces of free time
        """
        consumed: List[TimeRange] = []

        for candidate in self.candidates(reserved):
            if not dates_overlap(candidate.time, reserved.time):
                continue

            relation = classify(candidate.time, reserved.time)
            if relation is Relation.DISJOINT:
                continue

            remainder = self._remainder(candidate.time, reserved.time, relation)
            self._replace(candidate, [candidate.with_time(time) for time in remainder])
            consumed.append(
                candidate.time.with_clock(
                    max(candidate.time.start, reserved.time.start),
                    min(candidate.time.end, reserved.time.end),
                )
            )
            logger.debug(
                "Reservation %s against free %s (%s) leaves %d piece(s)",
                reserved, candidate, relation.value, len(remainder),
            )

        self._footprints[reserved] = consumed
        return consumed

    @staticmethod
    def _remainder(free: TimeRange, reserved: TimeRange, relation: Relation) -> List[TimeRange]:
        """
        What is left of a free window once a reservation is taken out of it.

        Example:
        Free: 08:00 - 16:00
        Reserved: 10:00 - 12:00 (inside)
        Result: [08:00-10:00, 12:00-16:00]
        """
        if relation is Relation.IDENTICAL:
            return []
        if relation is Relation.SAME_START:
            return [free.with_clock(reserved.end, free.end)]
        if relation is Relation.SAME_END:
            return [free.with_clock(free.start, reserved.start)]
        if relation is Relation.INSIDE:
            return [
                free.with_clock(free.start, reserved.start),
                free.with_clock(reserved.end, free.end),
            ]

        # Clipped: keep whatever sticks out on either side
        pieces: List[TimeRange] = []
        if free.start < reserved.start:
            pieces.append(free.with_clock(free.start, reserved.start))
        if reserved.end < free.end:
            pieces.append(free.with_clock(reserved.end, free.end))
        return pieces

    def retract_reservation(self, deleted: Appointment) -> None:
        """
        Give a deleted reservation's footprint back to the free collection.

        For every consumed piece, a free neighbour on the same date touching
        the piece is grown over it and then merged with a neighbour on the
        other side, if any. Without a touching neighbour the piece comes back
        as a free appointment of its own.
        """
        pieces = self._footprints.pop(deleted, [])
        groups = self._group_by_date(self.candidates(deleted))

        for piece in pieces:
            group = groups[piece.date]
            grown = self._grow_neighbour(group, piece)

            if grown is None:
                restored = Appointment(time=piece, room=deleted.room)
                self._free.append(restored)
                group.append(restored)
                logger.debug("Restored free %s", restored)
                continue

            self._merge_neighbour(group, grown)

    @staticmethod
    def _group_by_date(candidates: List[Appointment]) -> Dict[Date, List[Appointment]]:
        groups: Dict[Date, List[Appointment]] = defaultdict(list)
        for candidate in candidates:
            groups[candidate.time.date].append(candidate)
        return groups

    def _grow_neighbour(self, group: List[Appointment], piece: TimeRange) -> Appointment | None:
        """Extend the first free appointment touching ``piece`` over it."""
        for candidate in group:
            if candidate.time.end == piece.start:
                grown = candidate.with_time(candidate.time.with_clock(candidate.time.start, piece.end))
            elif candidate.time.start == piece.end:
                grown = candidate.with_time(candidate.time.with_clock(piece.start, candidate.time.end))
            else:
                continue

            self._replace(candidate, [grown], group)
            logger.debug("Grew free %s to %s", candidate, grown)
            return grown

        return None

    def _merge_neighbour(self, group: List[Appointment], grown: Appointment) -> None:
        """Fold a free appointment touching ``grown`` into it, if one exists."""
        for candidate in group:
            if candidate == grown:
                continue

            if candidate.time.end == grown.time.start:
                merged = candidate.with_time(candidate.time.with_clock(candidate.time.start, grown.time.end))
            elif candidate.time.start == grown.time.end:
                merged = candidate.with_time(candidate.time.with_clock(grown.time.start, candidate.time.end))
            else:
                continue

            self._replace(candidate, [merged], group)
            self._replace(grown, [], group)
            logger.debug("Merged free %s and %s into %s", candidate, grown, merged)
            return

    def _replace(
        self,
        old: Appointment,
        replacements: List[Appointment],
        group: List[Appointment] | None = None,
    ) -> None:
        """Swap ``old`` for ``replacements`` in place, in the free collection and the group."""
        for collection in (self._free, group):
            if collection is None:
                continue
            index = collection.index(old)
            collection[index:index + 1] = replacements

    def forget_room(self, room: Room) -> None:
        """Drop the footprints of every reservation in ``room``."""
        for reserved in [key for key in self._footprints if key.room == room]:
            del self._footprints[reserved]
