"""
ConversationId Value Object - canonical pairing of two account ids.

Both participants derive the same id without a lookup:
the two account ids are sorted and joined with "_".
"""

from dataclasses import dataclass

from friendchat.domain.value_objects.account_id import AccountId, PAIR_SEPARATOR


@dataclass(frozen=True, order=True)
class ConversationId:
    value: str

    def __post_init__(self):
        parts = self.value.split(PAIR_SEPARATOR) if self.value else []
        if len(parts) != 2 or not all(parts):
            raise ValueError(f"Invalid conversation ID: {self.value!r}")
        if parts[0] == parts[1]:
            raise ValueError("A conversation needs two distinct participants")
        if parts[0] > parts[1]:
            raise ValueError(f"Conversation ID is not canonical: {self.value}")

    @classmethod
    def for_pair(cls, first: AccountId, second: AccountId) -> "ConversationId":
        low, high = sorted([first.value, second.value])
        return cls(f"{low}{PAIR_SEPARATOR}{high}")

    @property
    def participants(self) -> tuple[AccountId, AccountId]:
        low, high = self.value.split(PAIR_SEPARATOR)
        return AccountId(low), AccountId(high)

    def other_participant(self, account_id: AccountId) -> AccountId:
        """Return the counterpart of account_id; raises if it is not a participant."""
        low, high = self.participants
        if account_id == low:
            return high
        if account_id == high:
            return low
        raise ValueError(
            f"Account {account_id.value} is not a participant of {self.value}"
        )

    def __str__(self) -> str:
        return self.value
