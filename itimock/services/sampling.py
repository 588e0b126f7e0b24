import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

def fisher_yates(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a uniformly shuffled copy of ``items``."""
    rng = rng or random.Random()
    out = list(items)
    for i in range(len(out) - 1, 0, -1):
        j = rng.randint(0, i)
        out[i], out[j] = out[j], out[i]
    return out

def sample_without_replacement(pool: Sequence[T], count: int, rng: Optional[random.Random] = None) -> List[T]:
    return fisher_yates(pool, rng)[:max(0, count)]
