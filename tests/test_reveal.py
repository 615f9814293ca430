import random

import pytest

from osfit.streaming import RevealEngine, next_chunk_size

from conftest import FixedRng, ManualScheduler


def reveal_chunks(text, rng=None, interval=8):
    """Tick an engine by hand and collect what each reveal added."""
    engine = RevealEngine(rng=rng or FixedRng(2))
    chunks = []
    engine.on_update = lambda prefix: chunks.append(prefix[sum(map(len, chunks)):])
    engine.start(text, interval)
    now = 0
    while not engine.is_complete:
        engine.tick(now)
        now += interval
    return engine, chunks


def test_whitespace_reveals_the_next_short_word():
    assert next_chunk_size(3, "Hi. Bye!") == len(" Bye!")
    assert next_chunk_size(0, "   indented") == len("   indented")


def test_long_word_after_whitespace_uses_a_stride():
    text = " " + "a" * 30
    assert next_chunk_size(0, text, FixedRng(3)) == 3


def test_code_fence_reveals_ten_characters():
    text = "```python\nprint('hello world')"
    assert next_chunk_size(3, text, FixedRng(2)) == 10


def test_code_fence_chunk_is_clamped():
    assert next_chunk_size(3, "```ab", FixedRng(2)) == 2


def test_punctuation_reveals_one_character():
    for char in ".,!?:;":
        assert next_chunk_size(1, f"a{char}bcdef", FixedRng(4)) == 1


def test_default_stride_is_in_range_and_clamped():
    rng = random.Random(1234)
    for _ in range(200):
        assert 2 <= next_chunk_size(0, "abcdefghij", rng) < 5
    assert next_chunk_size(1, "ab", FixedRng(4)) == 1


def test_nothing_left_gives_zero():
    assert next_chunk_size(5, "abcde") == 0
    assert next_chunk_size(0, "") == 0


def test_revealed_length_is_monotonic_and_completion_fires_once():
    text = "Progressive reveal, with punctuation! And ```code blocks``` too."
    completions = []
    engine = RevealEngine(rng=random.Random(7), on_complete=lambda: completions.append(True))
    engine.start(text, 8)

    lengths = []
    for now in range(0, 8 * 500, 4):
        engine.tick(now)
        lengths.append(engine.state.revealed_length)

    assert lengths == sorted(lengths)
    assert engine.get_visible_prefix() == text
    assert engine.is_complete
    assert completions == [True]


def test_empty_text_completes_on_first_tick():
    completions = []
    engine = RevealEngine(on_complete=lambda: completions.append(True))
    engine.start("")
    engine.tick(0)
    assert engine.is_complete
    assert engine.get_visible_prefix() == ""
    engine.tick(100)
    assert completions == [True]


def test_reveal_waits_for_the_base_interval():
    engine = RevealEngine(rng=FixedRng(2))
    engine.start("abcdef", 8)
    engine.tick(0)
    engine.tick(5)
    assert engine.get_visible_prefix() == ""
    engine.tick(8)
    assert engine.get_visible_prefix() == "ab"
    engine.tick(12)
    assert engine.get_visible_prefix() == "ab"


def test_replacing_text_resets_without_completing_old_text():
    completions = []
    engine = RevealEngine(rng=FixedRng(2), on_complete=lambda: completions.append(engine.state.source_text))
    engine.start("first text", 8)
    for now in (0, 8, 16):
        engine.tick(now)
    assert engine.state.revealed_length > 0

    engine.start("second", 8)
    assert engine.state.revealed_length == 0
    assert engine.get_visible_prefix() == ""
    assert completions == []

    now = 0
    while not engine.is_complete:
        engine.tick(now)
        now += 8
    assert engine.get_visible_prefix() == "second"
    assert completions == ["second"]


def test_starting_same_text_again_keeps_progress():
    engine = RevealEngine(rng=FixedRng(2))
    engine.start("abcdef", 8)
    engine.tick(0)
    engine.tick(8)
    engine.start("abcdef", 8)
    assert engine.get_visible_prefix() == "ab"


def test_negative_interval_is_rejected():
    with pytest.raises(ValueError):
        RevealEngine().start("text", -1)


def test_hi_bye_pauses_on_punctuation():
    engine, chunks = reveal_chunks("Hi. Bye!")
    assert engine.get_visible_prefix() == "Hi. Bye!"
    assert chunks == ["Hi", ".", " Bye!"]
    assert next_chunk_size(2, "Hi. Bye!") == 1
    assert next_chunk_size(7, "Hi. Bye!") == 1


def test_scheduler_drives_reveal_to_completion():
    scheduler = ManualScheduler()
    completions = []
    engine = RevealEngine(scheduler=scheduler, rng=FixedRng(3), on_complete=lambda: completions.append(True))
    engine.start("Scheduled reveal of a short answer.", 8)
    assert engine.is_running

    scheduler.run(step_ms=8)

    assert engine.get_visible_prefix() == "Scheduled reveal of a short answer."
    assert completions == [True]
    assert not engine.is_running
    assert scheduler.pending == {}


def test_cancel_releases_the_frame_and_is_idempotent():
    scheduler = ManualScheduler()
    engine = RevealEngine(scheduler=scheduler)
    engine.start("some text to reveal", 8)
    assert len(scheduler.pending) == 1

    engine.cancel()
    engine.cancel()
    assert scheduler.pending == {}
    assert not engine.is_running


def test_stale_frame_after_cancel_is_ignored():
    scheduler = ManualScheduler()
    engine = RevealEngine(scheduler=scheduler, rng=FixedRng(2))
    engine.start("abcdef", 0)
    stale_callback = next(iter(scheduler.pending.values()))

    engine.cancel()
    stale_callback(100)

    assert engine.get_visible_prefix() == ""
    assert scheduler.pending == {}


def test_restart_cancels_previous_frame():
    scheduler = ManualScheduler()
    engine = RevealEngine(scheduler=scheduler)
    engine.start("old text", 8)
    engine.start("new text", 8)
    assert len(scheduler.pending) == 1


def test_cancel_after_completion_is_safe():
    engine, _ = reveal_chunks("done.")
    engine.cancel()
    assert engine.is_complete
