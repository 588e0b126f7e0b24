import random
from collections import Counter
from itimock.services.sampling import fisher_yates, sample_without_replacement

def test_shuffle_keeps_items_and_leaves_input_alone():
    items = list(range(30))
    out = fisher_yates(items, random.Random(1))
    assert sorted(out) == items
    assert items == list(range(30))

def test_shuffle_is_roughly_uniform():
    rng = random.Random(99)
    firsts = Counter(fisher_yates("abc", rng)[0] for _ in range(6000))
    assert all(1700 < n < 2300 for n in firsts.values())

def test_sample_size_is_bounded_by_pool():
    rng = random.Random(5)
    assert len(sample_without_replacement(range(10), 4, rng)) == 4
    assert sorted(sample_without_replacement(range(3), 10, rng)) == [0, 1, 2]
    assert sample_without_replacement(range(3), 0, rng) == []
