import math

import pytest

from advsched.errors import ProtocolError
from advsched.work import Chunk, ChunkSlotTable, WorkGenerator


@pytest.mark.parametrize("points, granularity", [(1000, 10), (1005, 10), (10000, 100), (12345, 100)])
def test_chunks_partition_domain(points, granularity):
    generator = WorkGenerator(points, granularity)
    chunks = []
    while not generator.is_exhausted():
        chunks.append(generator.next_chunk())

    assert chunks[0].start == 0
    assert chunks[-1].stop == points
    for prev, cur in zip(chunks, chunks[1:]):
        assert prev.stop == cur.start
    assert all(c.stop - c.start == granularity for c in chunks[:-1])
    assert 0 < chunks[-1].stop - chunks[-1].start <= granularity
    assert generator.issued == len(chunks) == math.ceil(points / granularity)


def test_generator_cursor():
    generator = WorkGenerator(25, 10)
    assert not generator.is_exhausted()
    assert generator.next_chunk() == Chunk(0, 10)
    assert generator.completed_index == 10
    assert generator.next_chunk() == Chunk(10, 20)
    assert generator.next_chunk() == Chunk(20, 25)
    assert generator.is_exhausted()
    with pytest.raises(ProtocolError):
        generator.next_chunk()


def test_next_slot_cycles_per_worker():
    table = ChunkSlotTable(4, 3)
    assert [table.next_slot(1) for _ in range(7)] == [0, 1, 2, 0, 1, 2, 0]
    # other workers rotate independently
    assert table.next_slot(2) == 0
    assert table.next_slot(3) == 0
    assert table.next_slot(2) == 1


class _Request:
    def __init__(self):
        self.waited = False

    def wait(self):
        self.waited = True

    def test(self):
        return self.waited


def test_set_waits_for_previous_send_of_slot():
    table = ChunkSlotTable(2, 3)
    assert table.get(1, 0) is None

    first = _Request()
    table.set(1, 0, Chunk(0, 10))
    table.attach(1, 0, first)
    assert table.get(1, 0) == Chunk(0, 10)
    assert table.pending() == [first]

    table.set(1, 0, Chunk(30, 40))
    assert first.waited
    assert table.get(1, 0) == Chunk(30, 40)
    # the slot holds no request until the next send is attached
    assert table.pending() == []


def test_table_sized_from_group():
    table = ChunkSlotTable(64, 3)
    table.set(63, 2, Chunk(5, 6))
    assert table.get(63, 2) == Chunk(5, 6)
