"""
AccountPatch Value Object - a merge-style partial update of one account record.

Relation fields are updated with set semantics (add/remove by id), so the
same patch can be re-applied without creating duplicate entries. Scalar
fields are overwritten.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from friendchat.domain.value_objects.account_id import AccountId

RELATION_FIELDS = ("friends", "sent_requests", "received_requests")
SCALAR_FIELDS = ("is_private", "is_organizer", "username", "photo_url")


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class AccountPatch:
    add: Mapping[str, frozenset[AccountId]] = field(default_factory=dict)
    remove: Mapping[str, frozenset[AccountId]] = field(default_factory=dict)
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        for name in list(self.add) + list(self.remove):
            if name not in RELATION_FIELDS:
                raise ValueError(f"Unknown relation field: {name}")
        for name in self.values:
            if name not in SCALAR_FIELDS:
                raise ValueError(f"Unknown account field: {name}")

    def adding(self, name: str, *ids: AccountId) -> "AccountPatch":
        add = dict(self.add)
        add[name] = frozenset(add.get(name, frozenset()) | set(ids))
        return AccountPatch(add=_frozen(add), remove=self.remove, values=self.values)

    def removing(self, name: str, *ids: AccountId) -> "AccountPatch":
        remove = dict(self.remove)
        remove[name] = frozenset(remove.get(name, frozenset()) | set(ids))
        return AccountPatch(add=self.add, remove=_frozen(remove), values=self.values)

    def setting(self, **values: Any) -> "AccountPatch":
        merged = dict(self.values)
        merged.update(values)
        return AccountPatch(add=self.add, remove=self.remove, values=_frozen(merged))

    def is_empty(self) -> bool:
        return not (
            any(self.add.values()) or any(self.remove.values()) or self.values
        )

    def touched_fields(self) -> set[str]:
        return set(self.add) | set(self.remove) | set(self.values)
