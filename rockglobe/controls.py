"""Player input: keyboard and gamepad mapping, latching, shot cooldown and FPS."""

from __future__ import annotations

import dataclasses
import enum
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence


class Key(enum.IntEnum):
    """Keyboard key codes the controls react to."""

    SPACE = 32
    A = 65
    D = 68
    S = 83
    W = 87
    ESCAPE = 256
    TAB = 258
    RIGHT = 262
    LEFT = 263
    DOWN = 264
    UP = 265
    LEFT_SHIFT = 340
    LEFT_CONTROL = 341
    LEFT_ALT = 342
    RIGHT_SHIFT = 344
    RIGHT_CONTROL = 345


class GamepadButton(enum.IntEnum):
    """Indices into a gamepad's button array."""

    CROSS = 0
    CIRCLE = 1
    SQUARE = 2
    TRIANGLE = 3
    LEFT_BUMPER = 4
    RIGHT_BUMPER = 5
    BACK = 6
    START = 7
    GUIDE = 8
    LEFT_THUMB = 9
    RIGHT_THUMB = 10


class GamepadAxis(enum.IntEnum):
    """Indices into a gamepad's axis array."""

    LEFT_X = 0
    LEFT_Y = 1
    RIGHT_X = 2
    RIGHT_Y = 3
    LEFT_TRIGGER = 4
    RIGHT_TRIGGER = 5


STICK_DEADZONE = 0.1
LOOK_SENSITIVITY = 0.5
LOOK_SCALE = 10.0


@dataclass(frozen=True)
class InputState:
    """The controls requested during one frame."""

    exit: bool = False
    left: float = 0.0
    right: float = 0.0
    up: float = 0.0
    down: float = 0.0
    boost: float = 0.0
    mouse_x: float = 0.0
    mouse_y: float = 0.0
    jumping: bool = False
    sprinting: bool = False
    gravity_toggle: bool = False
    shooting: bool = False

    @property
    def is_moving(self) -> bool:
        return self.right > 0.0 or self.left > 0.0 or self.up > 0.0 or self.down > 0.0


def add_deadzone(value: float, deadzone: float, sensitivity: float = 1.0) -> float:
    """Zero values inside ``deadzone`` and rescale the rest to the full range."""
    if value >= deadzone:
        return ((value - deadzone) / (1.0 - deadzone)) * sensitivity
    if value <= -deadzone:
        return ((value + deadzone) / (1.0 - deadzone)) * sensitivity
    return 0.0


def merge_input_states(first: InputState, second: InputState) -> InputState:
    """Combine two input sources: strongest axis wins, mouse deltas add up."""
    return InputState(
        exit=first.exit or second.exit,
        up=max(first.up, second.up),
        left=max(first.left, second.left),
        down=max(first.down, second.down),
        right=max(first.right, second.right),
        boost=max(first.boost, second.boost),
        mouse_x=first.mouse_x + second.mouse_x,
        mouse_y=first.mouse_y + second.mouse_y,
        jumping=first.jumping or second.jumping,
        sprinting=first.sprinting or second.sprinting,
        gravity_toggle=first.gravity_toggle or second.gravity_toggle,
        shooting=first.shooting or second.shooting,
    )


def keyboard_to_input(
    is_pressed: Callable[[int], bool],
    mouse_x: float = 0.0,
    mouse_y: float = 0.0,
    mouse_shooting: bool = False,
) -> InputState:
    """Map pressed keys, a mouse delta and the left mouse button to an input state."""

    def any_pressed(*keys: Key) -> bool:
        return any(is_pressed(int(key)) for key in keys)

    def value(*keys: Key) -> float:
        return 1.0 if any_pressed(*keys) else 0.0

    return InputState(
        exit=any_pressed(Key.ESCAPE),
        up=value(Key.UP, Key.W),
        left=value(Key.LEFT, Key.A),
        down=value(Key.DOWN, Key.S),
        right=value(Key.RIGHT, Key.D),
        boost=value(Key.LEFT_SHIFT, Key.RIGHT_SHIFT, Key.LEFT_CONTROL, Key.RIGHT_CONTROL),
        gravity_toggle=any_pressed(Key.TAB),
        jumping=any_pressed(Key.SPACE),
        sprinting=any_pressed(Key.LEFT_ALT),
        shooting=bool(mouse_shooting),
        mouse_x=float(mouse_x),
        mouse_y=float(mouse_y),
    )


def gamepad_to_input(
    buttons: Optional[Sequence[object]], axes: Optional[Sequence[float]]
) -> InputState:
    """Map a gamepad's buttons and axes to an input state.

    ``None`` for either means no gamepad is connected and gives an idle state.
    """
    if buttons is None or axes is None:
        return InputState()
    if len(buttons) <= max(GamepadButton) or len(axes) <= max(GamepadAxis):
        raise ValueError("gamepad state has too few buttons or axes")

    def pressed(button: GamepadButton) -> bool:
        return bool(buttons[button])

    left_x = add_deadzone(axes[GamepadAxis.LEFT_X], STICK_DEADZONE)
    left_y = add_deadzone(axes[GamepadAxis.LEFT_Y], STICK_DEADZONE)
    right_x = add_deadzone(axes[GamepadAxis.RIGHT_X], STICK_DEADZONE, LOOK_SENSITIVITY)
    right_y = add_deadzone(axes[GamepadAxis.RIGHT_Y], STICK_DEADZONE, LOOK_SENSITIVITY)
    right_trigger = add_deadzone((axes[GamepadAxis.RIGHT_TRIGGER] + 1.0) / 2.0, STICK_DEADZONE)
    left_trigger = add_deadzone((axes[GamepadAxis.LEFT_TRIGGER] + 1.0) / 2.0, STICK_DEADZONE)

    return InputState(
        exit=pressed(GamepadButton.CIRCLE),
        jumping=pressed(GamepadButton.CROSS),
        sprinting=pressed(GamepadButton.LEFT_THUMB),
        gravity_toggle=pressed(GamepadButton.BACK),
        shooting=pressed(GamepadButton.RIGHT_BUMPER),
        right=max(left_x, 0.0),
        left=abs(min(left_x, 0.0)),
        down=max(left_y, 0.0),
        up=abs(min(left_y, 0.0)),
        boost=right_trigger + left_trigger,
        mouse_x=right_x * LOOK_SCALE,
        mouse_y=right_y * LOOK_SCALE,
    )


class InputTracker:
    """Merges input sources frame by frame.

    Sprinting stays on while the player keeps moving, and the gravity toggle
    fires only on the frame its button goes down.
    """

    def __init__(self) -> None:
        self.was_sprinting = False
        self.was_gravity_toggled = False

    def update(self, keyboard: InputState, gamepad: InputState) -> InputState:
        state = merge_input_states(keyboard, gamepad)
        sprinting = state.sprinting or self.was_sprinting
        self.was_sprinting = sprinting and state.is_moving

        is_toggling = state.gravity_toggle
        gravity_toggle = is_toggling and not self.was_gravity_toggled
        self.was_gravity_toggled = is_toggling

        return dataclasses.replace(state, sprinting=sprinting, gravity_toggle=gravity_toggle)


class ShotCooldown:
    """Turns shot requests into shots no closer together than ``cooldown`` seconds."""

    def __init__(self, cooldown: float = 0.1) -> None:
        if cooldown < 0:
            raise ValueError("cooldown must not be negative")
        self.cooldown = cooldown
        self.shot_requested = False
        self._last_shot: Optional[float] = None

    def request(self, requested: bool = True) -> None:
        self.shot_requested = bool(requested)

    def should_shoot_now(self, now: Optional[float] = None) -> bool:
        """Consume the pending request; true if it may fire at ``now``."""
        if not self.shot_requested:
            return False
        self.shot_requested = False

        if now is None:
            now = time.monotonic()
        if self._last_shot is not None and now - self._last_shot < self.cooldown:
            return False

        self._last_shot = now
        return True


class FpsCounter:
    """Frame rate measured over windows of at least a quarter second."""

    WINDOW = 0.25

    def __init__(self) -> None:
        self.fps = 60
        self._last_time = 0.0
        self._frames = 0

    def tick(self, now: float) -> int:
        """Count a frame finished at ``now`` seconds; return the current rate."""
        elapsed = now - self._last_time
        self._frames += 1
        if elapsed >= self.WINDOW:
            self.fps = int((1.0 / elapsed) * self._frames)
            self._last_time = now
            self._frames = 0
        return self.fps