"""
Composite actions — concurrent fan-out with index-preserving write-back.

A composite owns an ordered list of child actions and applies
execute/revert to all of them at once:

    1. mark self InProgress
    2. one worker per child, each on a private deep copy
    3. ActionErrors are collected; siblings keep running
    4. anything else a worker raises is a crash → TaskCrashedError now
    5. successful copies replace the originals at their own index
    6. 0 errors → terminal state, 1 → single-cause wrap, 2+ → multiple

On any error the composite stays InProgress. Children that finished
were written back with their new state, so a retry only redoes the
ones that failed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableSequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import ClassVar

from unwind.core.actions.actionable import Actionable
from unwind.core.actions.errors import (
    ActionError,
    ChildActionError,
    MultipleChildErrors,
    TaskCrashedError,
)
from unwind.core.models.action import ActionState

logger = logging.getLogger(__name__)


def run_children(
    children: MutableSequence[Actionable],
    operation: Callable[[Actionable], None],
) -> list[ActionError]:
    """Run ``operation`` on a private copy of every child concurrently.

    No explicit concurrency limit: the pool has one worker per child.

    Args:
        children: The owning list. Successful copies are written back
            into it at their original index.
        operation: Per-child call, e.g. ``lambda a: a.execute()``.

    Returns:
        Action errors ordered by child index (empty on full success).

    Raises:
        TaskCrashedError: A worker raised something other than an
            ActionError. Raised as soon as it is seen; the remaining
            workers are not awaited. A crash from a nested composite is
            re-raised unchanged, so it still names the innermost worker.
    """
    if not children:
        return []

    errors: dict[int, ActionError] = {}
    pool = ThreadPoolExecutor(
        max_workers=len(children),
        thread_name_prefix="unwind-action",
    )
    try:
        futures: dict[Future[None], tuple[int, Actionable]] = {}
        for idx, child in enumerate(children):
            clone = child.model_copy(deep=True)
            futures[pool.submit(operation, clone)] = (idx, clone)

        for future in as_completed(futures):
            idx, clone = futures[future]
            try:
                future.result()
            except ActionError as e:
                logger.debug("Child %d (%s) failed: %s", idx, clone.label, e)
                errors[idx] = e
                continue
            except TaskCrashedError:
                # Already names the worker that crashed in a nested composite
                raise
            except Exception as e:
                raise TaskCrashedError(clone.label, e) from e
            children[idx] = clone
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    return [errors[idx] for idx in sorted(errors)]


class CompositeAction(Actionable):
    """An action whose work is done entirely by its children.

    Subclasses declare:
        child_field: Name of the list field holding the children.
        child_errors: Child error type → single-cause wrapper, checked
            in order with ``isinstance``.
        multiple_error: Wrapper used when two or more children fail.
    """

    child_field: ClassVar[str]
    child_errors: ClassVar[tuple[tuple[type[ActionError], type[ChildActionError]], ...]] = ()
    multiple_error: ClassVar[type[MultipleChildErrors]] = MultipleChildErrors

    @property
    def child_actions(self) -> list[Actionable]:
        return getattr(self, self.child_field)

    def _execute(self) -> None:
        self.action_state = ActionState.IN_PROGRESS
        self._fan_out(lambda child: child.execute())

    def _revert(self) -> None:
        self.action_state = ActionState.IN_PROGRESS
        self._fan_out(lambda child: child.revert())

    def _fan_out(self, operation: Callable[[Actionable], None]) -> None:
        errors = run_children(self.child_actions, operation)
        if not errors:
            return
        if len(errors) == 1:
            raise self.wrap_child_error(errors[0])
        raise self.multiple_error(errors)

    @classmethod
    def wrap_child_error(cls, error: ActionError) -> ChildActionError:
        """Wrap a single child error in this composite's matching variant."""
        for error_type, wrapper in cls.child_errors:
            if isinstance(error, error_type):
                return wrapper(error)
        raise TypeError(
            f"{cls.__name__} has no error variant for {type(error).__name__}"
        )
