import time

import pytest

from ssgserve.timer import TimerWheel


def test_node_expires_after_full_rotation():
    wheel = TimerWheel(60, 1)
    node = wheel.add("conn", 60)
    assert node.slot_index == 0
    for _ in range(59):
        assert wheel.tick() == []
    assert wheel.tick() == [node]
    assert len(wheel) == 0


def test_zero_timeout_expires_on_next_tick():
    wheel = TimerWheel(60, 1)
    node = wheel.add("conn", 0)
    assert wheel.tick() == [node]


def test_interval_divides_timeout():
    wheel = TimerWheel(10, 5)
    node = wheel.add("conn", 12)
    assert node.slot_index == 2
    assert wheel.tick() == []
    assert wheel.tick() == [node]


def test_newest_node_comes_first():
    wheel = TimerWheel(8, 1)
    first = wheel.add("a", 1)
    second = wheel.add("b", 1)
    assert [n.conn for n in wheel.tick()] == ["b", "a"]
    assert first is not second


def test_remove_cancels_node():
    wheel = TimerWheel(8, 1)
    keep = wheel.add("keep", 1)
    drop = wheel.add("drop", 1)
    wheel.remove(drop)
    assert wheel.tick() == [keep]


def test_remove_expired_node_is_harmless():
    wheel = TimerWheel(8, 1)
    node = wheel.add("conn", 1)
    assert wheel.tick() == [node]
    wheel.remove(node)
    wheel.remove(None)
    assert len(wheel) == 0


def test_expiration_is_now_plus_timeout():
    wheel = TimerWheel(60, 1)
    before = int(time.time())
    node = wheel.add("conn", 30)
    after = int(time.time())
    assert before + 30 <= node.expiration <= after + 30


def test_clear_empties_wheel():
    wheel = TimerWheel(4, 1)
    wheel.add("a", 1)
    wheel.add("b", 3)
    assert len(wheel) == 2
    wheel.clear()
    assert len(wheel) == 0
    assert all(wheel.tick() == [] for _ in range(4))


def test_current_slot_wraps():
    wheel = TimerWheel(3, 1)
    slots = []
    for _ in range(4):
        wheel.tick()
        slots.append(wheel.current_slot)
    assert slots == [1, 2, 0, 1]


@pytest.mark.parametrize("slots, interval", [(0, 1), (4, 0), (-1, 1)])
def test_invalid_wheel_raises(slots, interval):
    with pytest.raises(ValueError):
        TimerWheel(slots, interval)


def test_negative_timeout_raises():
    with pytest.raises(ValueError):
        TimerWheel(4, 1).add("conn", -1)