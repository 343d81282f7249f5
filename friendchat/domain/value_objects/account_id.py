"""
AccountId Value Object - opaque, stable account identity.
"""

from dataclasses import dataclass

PAIR_SEPARATOR = "_"


@dataclass(frozen=True, order=True)
class AccountId:
    value: str

    def __post_init__(self):
        if not self.value or not self.value.strip():
            raise ValueError("AccountId cannot be empty")
        # The separator is reserved for canonical conversation ids
        if PAIR_SEPARATOR in self.value:
            raise ValueError(
                f"AccountId cannot contain '{PAIR_SEPARATOR}': {self.value}"
            )

    def __str__(self) -> str:
        return self.value
