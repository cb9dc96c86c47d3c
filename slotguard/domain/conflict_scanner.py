"""
Cross-shop overlap detection for availability slots.

Pure domain logic: the caller supplies the member's slots for the day, the
scanner decides which of them collide with a proposed window. No store
access happens here.
"""

from typing import List, Optional, Sequence

from .models import AvailabilitySlot, TimeWindow


class ConflictScanner:
    """
    Finds slots at other shops that overlap a proposed window.

    Algorithm:
    1. Drop inactive slots, slots at the proposed shop, and the excluded slot
    2. Compare each remaining slot's time-of-day window with the proposed one
       (half-open test, all candidates share the proposed date)
    3. Preserve the input order so the first conflict is the first scanned
    """

    def find_conflicts(
        self,
        proposed: TimeWindow,
        candidates: Sequence[AvailabilitySlot],
        shop_id: str,
        exclude_id: Optional[str] = None
    ) -> List[AvailabilitySlot]:
        """
        Return the candidate slots that conflict with the proposed window.

        Args:
            proposed: Time-of-day window being validated
            candidates: The team member's slots on the same date
            shop_id: Shop the proposed window belongs to
            exclude_id: Slot id to ignore (the slot being edited)

        Returns:
            Conflicting slots, in scan order
        """
        return [
            slot for slot in candidates
            if self._is_cross_shop_candidate(slot, shop_id, exclude_id)
            and slot.window().overlaps(proposed)
        ]

    @staticmethod
    def _is_cross_shop_candidate(
        slot: AvailabilitySlot,
        shop_id: str,
        exclude_id: Optional[str]
    ) -> bool:
        # Same-shop overlaps are a separate double-booking concern
        if not slot.is_active or slot.shop_id == shop_id:
            return False
        return exclude_id is None or slot.id != exclude_id
