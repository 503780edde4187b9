import io

import numpy as np

from countog_data_structures import AssembledSequence, CountogConfig
from countog_oligo_indexing import encode
from countog_sequence_parser import assemble_sequence
from countog_window_counter import WindowedCounter


def make_sequence(data: bytes) -> AssembledSequence:
    buffer = np.frombuffer(data, dtype=np.uint8)
    return AssembledSequence(
        buffer=buffer, length=len(data), bases=len(data), scaffolds=1, file_format="fasta"
    )


def make_counter(sequence, oligo, upto, shift=20000):
    return WindowedCounter(
        sequence, oligo=oligo, size_shift=shift, size_counting=upto, size_oligo=4**oligo
    )


def test_first_pass_over_short_fasta():
    sequence = assemble_sequence(io.BytesIO(b">seq1\nACGTACGT\n"), CountogConfig())
    counter = make_counter(sequence, oligo=2, upto=7)
    counts = counter.count_row()

    assert counts.sum() == 7
    assert counts[encode("ac")] == 2
    assert counts[encode("cg")] == 2
    assert counts[encode("gt")] == 2
    assert counts[encode("ta")] == 1
    assert counter.state.cursor == 8


def test_row_reaches_budget_by_resampling():
    sequence = assemble_sequence(io.BytesIO(b">seq1\nACGTACGT\n"), CountogConfig())
    counter = make_counter(sequence, oligo=2, upto=100)
    assert counter.size_shift == 1
    for _ in range(3):
        assert counter.count_row().sum() == 100


def test_counter_is_reset_every_row():
    counter = make_counter(make_sequence(b"acgtacgtac"), oligo=2, upto=5, shift=4)
    first = counter.count_row().copy()
    second = counter.count_row()
    assert first.sum() == 5
    assert second.sum() == 5


def test_epoch_jump_and_wrap():
    counter = make_counter(make_sequence(b"acgtacgtac"), oligo=2, upto=10, shift=4)
    assert counter.size_shift == 4

    counter.count_row()
    assert (counter.state.epoch, counter.state.cursor) == (1, 5)

    counter.count_row()
    assert (counter.state.epoch, counter.state.cursor) == (0, 5)


def test_unrepresentable_byte_is_skipped():
    counter = make_counter(make_sequence(b"acgnacgt"), oligo=3, upto=3)
    counts = counter.count_row()
    assert counts.sum() == 3
    assert counts[encode("acg")] == 2
    assert counts[encode("cgt")] == 1


def test_nothing_countable_ends_row():
    sequence = assemble_sequence(
        io.BytesIO(b"@r1\nACGTACGT\n+\n########\n"), CountogConfig()
    )
    assert sequence.buffer.tobytes() == b"n" * 9
    counter = make_counter(sequence, oligo=2, upto=100)
    assert counter.count_row().sum() == 0
    assert counter.count_row().sum() == 0


def test_sequence_shorter_than_oligo():
    counter = make_counter(make_sequence(b"ac"), oligo=3, upto=10)
    assert counter.count_row().sum() == 0


def test_row_sum_never_exceeds_budget():
    rng = np.random.default_rng(0)
    data = bytes(rng.choice(list(b"tcagn"), size=500).astype(np.uint8))
    counter = make_counter(make_sequence(data), oligo=3, upto=250, shift=64)
    for _ in range(20):
        assert counter.count_row().sum() == 250
