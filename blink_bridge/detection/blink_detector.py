"""
Blink edge detection

A sustained closed reading is one blink, not one blink per sample. A blink
fires on any transition into CLOSED from a non-closed state; UNKNOWN samples
carry no information and never overwrite the last known state.
"""

from typing import Optional

from ..core.data_types import BlinkEvent, EyeState


class BlinkDetector:
    """Edge-triggered blink detector holding the current eye state"""

    def __init__(self):
        self.current_state = EyeState.UNKNOWN
        self.blink_total = 0

    @staticmethod
    def is_blink(previous: EyeState, new: EyeState) -> bool:
        return previous is not EyeState.CLOSED and new is EyeState.CLOSED

    def update(self, new_state: EyeState, timestamp: int) -> Optional[BlinkEvent]:
        """
        Feed one classified sample

        Args:
            new_state: Classification of the current notification
            timestamp: Classification time in milliseconds

        Returns:
            BlinkEvent on an open/unknown -> closed transition, else None
        """
        event = None
        if self.is_blink(self.current_state, new_state):
            event = BlinkEvent(timestamp=int(timestamp))
            self.blink_total += 1

        if new_state is not EyeState.UNKNOWN:
            self.current_state = new_state
        return event

    def reset(self):
        self.current_state = EyeState.UNKNOWN
        self.blink_total = 0
