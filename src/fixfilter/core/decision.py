from enum import Enum


class Decision(Enum):
    """Outcome of evaluating one candidate fix."""
    ACCEPT = "accept"
    REJECT = "reject"

    @property
    def accepted(self) -> bool:
        return self is Decision.ACCEPT
