from __future__ import annotations

from enum import Enum

from typing_extensions import Literal, TypeAlias


class Sentinel(Enum):
    UNSET = "UNSET"

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return self.name


UnsetType: TypeAlias = Literal[Sentinel.UNSET]
UNSET: UnsetType = Sentinel.UNSET
