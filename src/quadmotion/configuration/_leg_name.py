from enum import Enum


class LegName(Enum):
    """Enum for the four legs, in joint vector order"""

    FRONT_LEFT = 'front_left'
    FRONT_RIGHT = 'front_right'
    REAR_LEFT = 'rear_left'
    REAR_RIGHT = 'rear_right'

    @property
    def index(self) -> int:
        return LEG_ORDER.index(self)

    @property
    def is_left(self) -> bool:
        return self in (LegName.FRONT_LEFT, LegName.REAR_LEFT)

    @property
    def is_front(self) -> bool:
        return self in (LegName.FRONT_LEFT, LegName.FRONT_RIGHT)


LEG_ORDER = (LegName.FRONT_LEFT, LegName.FRONT_RIGHT, LegName.REAR_LEFT, LegName.REAR_RIGHT)


class LegGroup(Enum):
    """Diagonal leg pairs that swing together in the alternating gait"""

    A = 'a'
    B = 'b'

    @property
    def legs(self) -> tuple[LegName, LegName]:
        if self is LegGroup.A:
            return (LegName.FRONT_LEFT, LegName.REAR_RIGHT)
        return (LegName.FRONT_RIGHT, LegName.REAR_LEFT)

    @property
    def other(self) -> 'LegGroup':
        return LegGroup.B if self is LegGroup.A else LegGroup.A
