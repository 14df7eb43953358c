"""
Action Decoding
===============

Discrete action vector shared by the policy, the environment and agents.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence, Union

import numpy as np

# Branch sizes of the action vector
ACTION_BRANCHES = (3, 3, 2, 2, 2)


class MoveAxis(IntEnum):
    NONE = 0
    FORWARD = 1
    BACKWARD = 2


class RotateAxis(IntEnum):
    NONE = 0
    CLOCKWISE = 1
    COUNTER_CLOCKWISE = 2


@dataclass(frozen=True)
class ActionRequest:
    """
    One decoded action vector.

    Layout: [forward, rotate, shoot, seek_target, seek_base]
    """
    forward: MoveAxis = MoveAxis.NONE
    rotate: RotateAxis = RotateAxis.NONE
    shoot: bool = False
    seek_target: bool = False
    seek_base: bool = False

    @classmethod
    def from_array(cls, action: Union[Sequence[float], np.ndarray]) -> "ActionRequest":
        """
        Decode a 5-branch discrete action.

        Unknown axis values fall back to NONE so that a malformed action
        still produces a deterministic intent.
        """
        values = [int(v) for v in np.asarray(action).reshape(-1)[:5]]
        values += [0] * (5 - len(values))
        forward, rotate, shoot, seek_target, seek_base = values
        return cls(
            forward=MoveAxis(forward) if forward in (1, 2) else MoveAxis.NONE,
            rotate=RotateAxis(rotate) if rotate in (1, 2) else RotateAxis.NONE,
            shoot=shoot == 1,
            seek_target=seek_target == 1,
            seek_base=seek_base == 1
        )

    def to_array(self) -> np.ndarray:
        return np.array(
            [int(self.forward), int(self.rotate), int(self.shoot),
             int(self.seek_target), int(self.seek_base)],
            dtype=np.int64
        )
