"""Node id generation.

Ids are random by default. A sequential generator can be installed for the
duration of a ``with use_id_generator(...)`` block to get reproducible trees.
"""

import itertools
import re
import uuid
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, Optional

if TYPE_CHECKING:
    from .node import Node

IdGenerator = Callable[[], str]

RANDOM_ID_LENGTH = 12


def random_id() -> str:
    """Return a random 12 character hex id."""
    return uuid.uuid4().hex[:RANDOM_ID_LENGTH]


class SequentialIdGenerator:
    """Callable producing ``<prefix>1``, ``<prefix>2``, ..."""

    def __init__(self, prefix: str = "n", start: int = 1) -> None:
        if not prefix:
            raise ValueError("Id prefix cannot be empty")
        if start < 0:
            raise ValueError("start must be >= 0")
        self.prefix = prefix
        self._counter = itertools.count(start)

    def __call__(self) -> str:
        return f"{self.prefix}{next(self._counter)}"

    @classmethod
    def after(cls, root: Optional["Node"], prefix: str = "n") -> "SequentialIdGenerator":
        """Create a generator whose ids do not collide with those in ``root``."""
        if root is None:
            return cls(prefix)

        pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
        highest = 0
        for node in root.to_array():
            match = pattern.match(node.id)
            if match:
                highest = max(highest, int(match.group(1)))
        return cls(prefix, start=highest + 1)


_generator: IdGenerator = random_id


def generate_id() -> str:
    """Return a new id from the active generator."""
    return _generator()


@contextmanager
def use_id_generator(generator: IdGenerator) -> Iterator[IdGenerator]:
    """Install ``generator`` as the active id source inside the block."""
    global _generator
    previous = _generator
    _generator = generator
    try:
        yield generator
    finally:
        _generator = previous
