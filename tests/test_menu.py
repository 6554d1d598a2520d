from __future__ import annotations

import random

import numpy as np
import pytest

from carousel import CarouselConfig, CarouselMenu, MenuState, OpenBehavior, SpatialObject, TweenEngine
from conftest import RecordingMotion, build_menu, selected_count, slot_x


def test_new_menu_is_closed_and_refuses_navigation():
    menu, _ = build_menu(3, opened=False)
    assert menu.state is MenuState.CLOSED
    assert menu.rotate_next() is None
    assert menu.rotate_prev() is None
    assert menu.select() is None
    assert menu.selected_id == 0
    assert selected_count(menu) == 0


def test_grow_open_restores_baseline_scale(motion):
    menu = CarouselMenu(motion, CarouselConfig(open_behavior=OpenBehavior.GROW))
    obj = SpatialObject(scale=(0.5, 0.5, 0.5))
    menu.add_item(obj)
    assert np.allclose(obj.get_scale(), 0)

    done = menu.open()
    assert done is not None and done.done()
    assert menu.state is MenuState.OPEN_IDLE
    assert np.allclose(obj.get_scale(), 0.5)
    assert menu.open() is None


def test_close_shrinks_everything_and_is_idempotent(five):
    menu, objects, motion = five
    assert menu.close() is not None
    assert menu.state is MenuState.CLOSED
    assert all(np.allclose(obj.get_scale(), 0) for obj in objects)
    assert menu.close() is None
    assert selected_count(menu) == 0

    menu.open()
    assert selected_count(menu) == 1
    assert menu.selected_id == 0


def test_fade_behavior_uses_opacity(motion):
    menu = CarouselMenu(motion, CarouselConfig(open_behavior=OpenBehavior.FADE))
    obj = SpatialObject()
    menu.add_item(obj)
    assert np.allclose(obj.get_scale(), 1)
    assert obj.get_opacity() == 0.0

    menu.open()
    assert obj.get_opacity() == 1.0
    menu.close()
    assert obj.get_opacity() == 0.0


def test_no_transition_open_is_immediate(motion):
    menu = CarouselMenu(motion, CarouselConfig(open_behavior=OpenBehavior.NONE))
    obj = SpatialObject()
    menu.add_item(obj)
    menu.open()
    assert motion.calls == []
    assert np.allclose(obj.get_scale(), 1)


def test_item_added_while_open_keeps_its_scale(five):
    menu, _, _ = five
    late = SpatialObject()
    menu.add_item(late)
    assert np.allclose(late.get_scale(), 1)


def test_five_item_scenario(five):
    menu, _, _ = five
    assert menu.selected_id == 0
    assert (menu.left_edge, menu.right_edge) == (3, 2)

    expected = [(1, 4, 3), (2, 0, 4), (3, 1, 0)]
    for selected, left, right in expected:
        assert menu.rotate_next() is not None
        assert (menu.selected_id, menu.left_edge, menu.right_edge) == (selected, left, right)
        assert menu.ring.edges.is_adjacent()


def test_rotate_next_teleports_left_edge_and_shifts_every_slot(five):
    menu, _, motion = five
    menu.rotate_next()
    assert slot_x(menu) == {0: -1, 1: 0, 2: 1, 3: 2, 4: -2}

    requests = motion.position_requests()
    assert len(requests) == 5
    assert all(r[3] == pytest.approx(menu.config.step_duration) for r in requests)


def test_rotate_prev_mirrors_rotate_next(five):
    menu, _, _ = five
    menu.rotate_prev()
    assert menu.selected_id == 4
    assert (menu.left_edge, menu.right_edge) == (2, 1)
    assert slot_x(menu) == {0: 1, 1: 2, 2: -2, 3: -1, 4: 0}


@pytest.mark.parametrize("count", [3, 4, 5, 6])
def test_next_then_prev_from_fresh_layout_restores_state(count):
    menu, _ = build_menu(count)
    before = (menu.selected_id, menu.left_edge, menu.right_edge, slot_x(menu))
    menu.rotate_next()
    menu.rotate_prev()
    assert (menu.selected_id, menu.left_edge, menu.right_edge, slot_x(menu)) == before


def test_two_item_fresh_layout_settles_seam_after_first_rotation():
    menu, _ = build_menu(2)
    # Both edges start on the second node
    assert (menu.left_edge, menu.right_edge) == (1, 1)
    menu.rotate_next()
    menu.rotate_prev()
    assert menu.selected_id == 0
    assert (menu.left_edge, menu.right_edge) == (1, 0)
    assert menu.ring.edges.is_adjacent()


@pytest.mark.parametrize("count", [2, 3, 4, 5, 6])
def test_next_then_prev_restores_selection_and_edges(count):
    menu, _ = build_menu(count)
    menu.rotate_next()
    before = (menu.selected_id, menu.left_edge, menu.right_edge, slot_x(menu))
    menu.rotate_next()
    menu.rotate_prev()
    assert (menu.selected_id, menu.left_edge, menu.right_edge, slot_x(menu)) == before


def test_prev_then_next_from_fresh_layout(five):
    menu, _, _ = five
    before = (menu.selected_id, menu.left_edge, menu.right_edge, slot_x(menu))
    menu.rotate_prev()
    menu.rotate_next()
    assert (menu.selected_id, menu.left_edge, menu.right_edge, slot_x(menu)) == before


@pytest.mark.parametrize("count", range(2, 9))
def test_random_walks_keep_single_selection_at_center(count):
    rng = random.Random(count)
    menu, _ = build_menu(count, offset=(0, 2, 0))
    for _ in range(40):
        if rng.random() < 0.5:
            menu.rotate_next()
        else:
            menu.rotate_prev()
        assert selected_count(menu) == 1
        assert np.allclose(menu.selected.slot, (0, 2, 0))
        assert menu.ring.edges.is_adjacent()
        assert menu.ring.check_cycle()


def test_single_item_and_empty_menu_do_not_rotate(motion):
    empty = CarouselMenu(motion)
    empty.open()
    assert empty.rotate_next() is None
    assert empty.select() is None

    menu, _ = build_menu(1, motion)
    assert menu.rotate_next() is None
    assert menu.rotate_prev() is None
    assert menu.selected_id == 0


def test_non_revolving_stops_at_the_ends():
    menu, _ = build_menu(3, revolving=False)
    assert menu.rotate_next() is not None
    assert menu.rotate_next() is not None
    assert menu.selected_id == 2
    for _ in range(3):
        assert menu.rotate_next() is None
    assert menu.selected_id == 2

    menu.rotate_prev()
    menu.rotate_prev()
    assert menu.selected_id == 0
    assert menu.rotate_prev() is None
    assert menu.selected_id == 0


def test_disabled_menu_refuses_commands(five):
    menu, _, _ = five
    menu.set_enabled(False)
    assert menu.rotate_next() is None
    assert menu.select() is None
    menu.set_enabled(True)
    assert menu.rotate_next() is not None


class ReentrantMotion(RecordingMotion):
    """Tries to start a second rotation from inside every motion request."""

    def __init__(self) -> None:
        super().__init__()
        self.menu = None
        self.nested = []
        self.states = []

    def animate_to(self, target, properties, duration, on_complete=None):
        if self.menu is not None and "position" in properties:
            self.states.append(self.menu.state)
            self.nested.append(self.menu.rotate_next())
        super().animate_to(target, properties, duration, on_complete)


def test_overlapping_rotation_is_rejected_during_dispatch():
    motion = ReentrantMotion()
    menu, _ = build_menu(4, motion)
    motion.menu = menu

    assert menu.rotate_next() is not None
    assert motion.nested == [None] * 4
    assert set(motion.states) == {MenuState.OPEN_ROTATING}
    assert menu.selected_id == 1
    assert menu.state is MenuState.OPEN_IDLE


def test_guard_released_before_completion_signal():
    menu, _ = build_menu(4)
    chained = []
    menu.rotate_next().add_done_callback(lambda f: chained.append(menu.rotate_next()))
    assert chained and chained[0] is not None
    assert menu.selected_id == 2


def test_rotation_future_waits_for_motion():
    motion = RecordingMotion(auto_complete=False)
    menu, _ = build_menu(3, motion)
    motion.complete_all()

    step = menu.rotate_next()
    assert not step.done()
    # Logical state is already final
    assert menu.selected_id == 1
    # Guard is not tied to the visual motion
    second = menu.rotate_next()
    assert second is not None

    motion.complete_all()
    assert step.done() and step.result() == 1
    assert second.done() and second.result() == 2


def test_select_pulses_then_fires_callback(motion):
    fired = []
    menu = CarouselMenu(motion, CarouselConfig(resize_scale=0.25, resize_speed=3))
    menu.add_item(SpatialObject(), on_select=lambda: fired.append("a"))
    menu.add_item(SpatialObject(), on_select=lambda: fired.append("b"))
    menu.open()
    menu.rotate_next()

    done = menu.select()
    assert fired == ["b"]
    assert done.result() == 1

    kind, target, props, duration, yoyo, repeat = motion.calls[-1]
    assert kind == "from_to"
    assert target is menu.node(1).payload
    assert np.allclose(props["scale"], 1.25)
    assert duration == pytest.approx(0.3)
    assert yoyo is True and repeat == 1
    assert np.allclose(target.get_scale(), 1.0)


def test_select_callback_error_lands_on_future(motion):
    def boom():
        raise RuntimeError("nope")

    menu = CarouselMenu(motion)
    menu.add_item(SpatialObject(), on_select=boom)
    menu.open()
    done = menu.select()
    with pytest.raises(RuntimeError):
        done.result()


def test_select_refused_while_pulse_plays():
    engine = TweenEngine()
    fired = []
    clock = [0.0]
    menu = CarouselMenu(engine)
    menu.add_item(SpatialObject(), on_select=lambda: fired.append(clock[0]))
    menu.open()
    engine.finish_all()

    first = menu.select()
    engine.update(0.01)
    clock[0] = 0.01
    assert menu.select() is None
    assert fired == []
    assert not first.done()

    clock[0] = 1.0
    engine.finish_all()
    assert fired == [1.0]
    assert first.result() == 0
    assert menu.select() is not None


def test_close_during_pulse_drops_callback():
    engine = TweenEngine()
    fired = []
    menu = CarouselMenu(engine)
    menu.add_item(SpatialObject(), on_select=lambda: fired.append("x"))
    menu.open()
    engine.finish_all()

    pulse = menu.select()
    engine.update(0.05)
    menu.close()
    engine.finish_all()
    assert fired == []
    assert pulse.result() is None

    menu.open()
    engine.finish_all()
    assert menu.select() is not None


def test_select_without_callback_still_pulses(five):
    menu, _, _ = five
    assert menu.select().result() == 0


def test_positions_settle_with_tween_engine():
    engine = TweenEngine()
    menu, objects = build_menu(5, engine)
    engine.finish_all()

    step = menu.rotate_next()
    engine.update(menu.config.step_duration / 2)
    assert not step.done()
    # Teleported node starts beyond the right edge
    assert objects[3].get_position()[0] > 2

    engine.finish_all()
    assert step.done()
    xs = {i: round(float(obj.get_position()[0]), 6) for i, obj in enumerate(objects)}
    assert xs == {0: -1, 1: 0, 2: 1, 3: 2, 4: -2}


def test_rapid_rotations_retarget_in_flight_motion():
    engine = TweenEngine()
    menu, objects = build_menu(5, engine)
    engine.finish_all()

    first = menu.rotate_next()
    engine.update(0.05)
    second = menu.rotate_next()
    # Superseded tweens complete, so the first step still resolves
    assert first.done()
    engine.finish_all()
    assert second.done()
    xs = sorted(round(float(obj.get_position()[0]), 6) for obj in objects)
    assert xs == [-2, -1, 0, 1, 2]
    assert objects[2].get_position()[0] == pytest.approx(0)


def test_move_and_reset_group_transform(motion):
    group = SpatialObject("group")
    menu = CarouselMenu(motion, group=group)
    obj = SpatialObject()
    menu.add_item(obj)
    assert obj.parent is group
    assert menu.move_menu(position=(1, 2, 3)) is None

    menu.open()
    menu.move_menu(position=(1, 2, 3), rotation=(0, 0.5, 0), scale=2, duration=0.25)
    assert np.allclose(group.get_position(), (1, 2, 3))
    assert np.allclose(group.get_scale(), 2)
    assert motion.calls[-1][3] == 0.25

    menu.reset_menu()
    assert np.allclose(group.get_position(), 0)
    assert np.allclose(group.get_rotation(), 0)
    assert np.allclose(group.get_scale(), 1)


def test_animate_spins_selected_item_slower(five):
    menu, objects, _ = five
    menu.animate(10.0)
    speed = menu.config.default_speed
    assert objects[0].get_rotation()[1] == pytest.approx(speed * 0.25 * 10)
    assert objects[1].get_rotation()[1] == pytest.approx(speed * 10)
    assert objects[1].get_rotation()[0] == 0


def test_reset_clears_ring_and_closes(five):
    menu, _, _ = five
    menu.rotate_next()
    menu.reset()
    assert len(menu) == 0
    assert menu.state is MenuState.CLOSED
    assert menu.selected_id is None
    assert menu.left_edge is None and menu.right_edge is None
    assert menu.add_item(SpatialObject()) == 0


def test_menus_do_not_share_state():
    first, _ = build_menu(4)
    second, _ = build_menu(3)
    first.rotate_next()
    assert second.selected_id == 0
    assert (second.left_edge, second.right_edge) == (2, 1)
