from typing import Optional

import attrs


@attrs.define(frozen=True)
class UserIdentity:
    """Identity vouched for by the upstream auth gateway."""

    id: str
    email: Optional[str] = None
