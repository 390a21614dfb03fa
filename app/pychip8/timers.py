from pychip8.state import VMState


def tick_timers(state: VMState) -> None:
    """One fixed-rate tick: both countdowns drop by one and stop at zero."""
    if state.delay_timer > 0:
        state.delay_timer -= 1

    if state.sound_timer > 0:
        state.sound_timer -= 1
