"""Root logging setup that labels every record with the running command."""

import contextvars
import logging
from contextlib import contextmanager
from typing import Iterator

NO_PHASE = "-"
LOG_FORMAT = "%(asctime)s %(levelname)-7s phase=%(phase)s %(name)s: %(message)s"

_current_phase = contextvars.ContextVar("wasmbind_phase", default=NO_PHASE)


class PhaseFilter(logging.Filter):
    """Copy the phase of the enclosing `phase_context` onto each record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.phase = _current_phase.get()
        return True


def configure_structured_logging(level: int = logging.INFO) -> None:
    """Send root logging through LOG_FORMAT at the given level.

    Existing root handlers are reformatted; a stderr handler is added when
    there are none. Repeated calls leave one PhaseFilter per handler.
    """
    root = logging.getLogger()
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    root.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in root.handlers:
        handler.setFormatter(formatter)
        if not any(isinstance(f, PhaseFilter) for f in handler.filters):
            handler.addFilter(PhaseFilter())


@contextmanager
def phase_context(phase: str) -> Iterator[None]:
    """Label records logged inside the block with phase"""
    token = _current_phase.set(phase)
    try:
        yield
    finally:
        _current_phase.reset(token)
