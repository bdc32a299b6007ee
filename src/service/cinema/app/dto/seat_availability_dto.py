from typing import List

import attrs


@attrs.define
class SeatAvailabilityResult:
    available: List[str] = attrs.field(factory=list)
    unavailable: List[str] = attrs.field(factory=list)

    @property
    def all_available(self) -> bool:
        return not self.unavailable
