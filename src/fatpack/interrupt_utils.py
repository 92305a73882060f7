"""Utilities for handling KeyboardInterrupt in try-except blocks.

External build tools run for minutes; an interrupt must reach the main
thread even when it is caught inside a stage's exception handler.
"""

import _thread


def handle_keyboard_interrupt_properly(ke: KeyboardInterrupt) -> None:
    """Propagate a KeyboardInterrupt to the main thread and re-raise it.

    Usage:
        try:
            runner.run(["xcodebuild", "build"])
        except KeyboardInterrupt as ke:
            handle_keyboard_interrupt_properly(ke)

    Args:
        ke: The KeyboardInterrupt exception to handle

    Raises:
        KeyboardInterrupt: Always
    """
    _thread.interrupt_main()
    raise ke
