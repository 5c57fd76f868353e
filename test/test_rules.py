# test/test_rules.py
import numpy as np

from advisor.rules.decision import decide
from advisor.rules.interpreter import DetectionInterpreter
from advisor.rules.notifier import NotificationDebouncer
from advisor.types import ActionState, Category, Detection, FrameSignals
from advisor.utils.color import FramePixels


def _pixels():
    return FramePixels(np.zeros((480, 640, 3), dtype=np.uint8))


def _interpret(*dets, interpreter=None):
    interpreter = interpreter or DetectionInterpreter()
    signals = FrameSignals()
    pixels = _pixels()
    for d in dets:
        interpreter.interpret(d, pixels, signals)
    return signals


def test_categorize_is_exact_match():
    it = DetectionInterpreter()
    assert it.categorize("person") is Category.HAZARD
    assert it.categorize("traffic light") is Category.TRAFFIC_LIGHT
    assert it.categorize("Person") is Category.OTHER
    assert it.categorize("car") is Category.OTHER


def test_low_score_detection_is_ignored():
    s = _interpret(Detection("person", (0, 0, 200, 200), 0.49))
    assert s.descriptors == []
    assert not s.stop_detected


def test_close_hazard_sets_stop():
    s = _interpret(Detection("person", (0, 0, 200, 200), 0.9))
    assert s.stop_detected
    assert s.nearest_stop_distance == 1.39
    assert s.descriptors == ["person (1.39m)"]


def test_far_hazard_only_described():
    s = _interpret(Detection("dog", (0, 0, 20, 20), 0.8))
    assert not s.stop_detected
    assert s.nearest_stop_distance is None
    assert s.descriptors == ["dog (13.86m)"]


def test_first_close_hazard_gives_display_distance():
    s = _interpret(
        Detection("cow", (0, 0, 100, 100), 0.7),
        Detection("person", (300, 0, 200, 200), 0.9),
    )
    assert s.nearest_stop_distance == 2.77
    assert s.descriptors == ["cow (2.77m)", "person (1.39m)"]


def test_hazard_with_degenerate_box():
    s = _interpret(Detection("cat", (5, 5, 0, 10), 0.9))
    assert not s.stop_detected
    assert s.descriptors == ["cat (-)"]


def test_other_label_has_no_signal():
    s = _interpret(Detection("car", (0, 0, 200, 200), 0.9))
    assert s.descriptors == ["car (1.39m)"]
    assert not (s.stop_detected or s.green_light or s.red_or_yellow_light)


def test_dark_traffic_light_counts_as_red():
    s = _interpret(Detection("traffic light", (100, 50, 40, 90), 0.8))
    assert s.red_or_yellow_light
    assert not s.green_light
    assert s.descriptors == ["traffic light - R"]
    assert len(s.bands) == 3


def test_stop_distance_from_config():
    it = DetectionInterpreter.from_config({"perception": {"stop_distance_m": 1.0}})
    s = _interpret(Detection("person", (0, 0, 200, 200), 0.9), interpreter=it)
    assert not s.stop_detected


def test_decide_priority():
    assert decide(FrameSignals(stop_detected=True, green_light=True)).action is ActionState.STOP
    assert decide(FrameSignals(red_or_yellow_light=True, green_light=True)).action is ActionState.STOP
    green = decide(FrameSignals(green_light=True))
    assert green.action is ActionState.PROCEED_SLOWLY
    assert green.advisory == "proceed slowly"
    assert decide(FrameSignals(stop_detected=True)).advisory == "stop"


def test_decide_idle_same_as_green():
    assert decide(FrameSignals()) == decide(FrameSignals(green_light=True))


def test_debouncer_first_frame_notifies():
    deb = NotificationDebouncer()
    event = deb.maybe_notify(ActionState.PROCEED_SLOWLY, "proceed slowly")
    assert event is not None
    assert (event.text, event.lang) == ("proceed slowly", "ko-KR")


def test_debouncer_repeated_action_is_silent():
    deb = NotificationDebouncer()
    assert deb.maybe_notify(ActionState.STOP, "stop") is not None
    assert deb.maybe_notify(ActionState.STOP, "stop") is None


def test_debouncer_alternating_actions():
    deb = NotificationDebouncer(lang="en-US")
    events = [
        deb.maybe_notify(ActionState.STOP, "stop"),
        deb.maybe_notify(ActionState.PROCEED_SLOWLY, "proceed slowly"),
        deb.maybe_notify(ActionState.STOP, "stop"),
    ]
    assert all(e is not None for e in events)
    assert events[0].lang == "en-US"


def test_debouncers_are_independent():
    a, b = NotificationDebouncer(), NotificationDebouncer()
    a.maybe_notify(ActionState.STOP, "stop")
    assert b.maybe_notify(ActionState.STOP, "stop") is not None
