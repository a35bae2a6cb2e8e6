# portfolio_tracker/utils/context.py
"""
Run context for log correlation.

Every snapshot build gets a short run id so the log lines of one build can
be told apart from those of a concurrent refresh. Uses contextvars, so the
id propagates through await calls and into tasks created inside the run.

Usage:
    from portfolio_tracker.utils.context import snapshot_run, get_run_id

    with snapshot_run() as run_id:
        ...                     # get_run_id() == run_id here
"""

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

_run_id_var: ContextVar[str | None] = ContextVar("snapshot_run_id", default=None)


def get_run_id() -> str | None:
    """Return the current run id, or None outside a run."""
    return _run_id_var.get()


def new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def snapshot_run(run_id: str | None = None) -> Iterator[str]:
    """
    Bind a run id for the duration of the block.

    The previous value is restored on exit, so nested runs behave.
    """
    run_id = run_id or new_run_id()
    token = _run_id_var.set(run_id)
    try:
        yield run_id
    finally:
        _run_id_var.reset(token)
