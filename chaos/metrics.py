import math

from core.errors import SnapshotMismatchError


def distance(a, b):
    """Mean Euclidean distance between index-aligned positions of two snapshots.

    ``a`` and ``b`` are ``Snapshot`` objects or sequences of ``(x, y)``
    pairs. Empty snapshots are at distance 0.
    """
    if len(a) != len(b):
        raise SnapshotMismatchError(len(a), len(b))
    if not len(a):
        return 0.0
    total = 0.0
    for (x1, y1), (x2, y2) in zip(a, b):
        total += math.hypot(x1 - x2, y1 - y2)
    return total / len(a)
