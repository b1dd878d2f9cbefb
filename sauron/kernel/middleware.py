"""
Sauron Kernel — Middleware

Middleware wraps the reducer: (state, action, next) → ReduceResult.
Each middleware may inspect the action, short-circuit by not calling next,
or observe the result on the way back out.

compose(logging_middleware, validation_middleware)(reducer) runs logging
first, then validation, then the reducer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sauron.kernel.types import Action, BuildState, ReduceResult
from sauron.kernel.validation import validate_action

logger = logging.getLogger(__name__)

Reducer = Callable[[BuildState, Action], ReduceResult]
Next = Callable[[BuildState, Action], ReduceResult]
Middleware = Callable[[BuildState, Action, Next], ReduceResult]

# Actions whose payload gets the structural gate
_GATED = {"assembly.add", "part.add"}


def compose(*middlewares: Middleware) -> Callable[[Reducer], Reducer]:
    """Fold middlewares right-to-left around a reducer."""

    def wrap(reducer: Reducer) -> Reducer:
        pipeline = reducer
        for middleware in reversed(middlewares):
            pipeline = _bind(middleware, pipeline)
        return pipeline

    return wrap


def _bind(middleware: Middleware, next_: Reducer) -> Reducer:
    def run(state: BuildState, action: Action) -> ReduceResult:
        return middleware(state, action, next_)

    return run


def validation_middleware(state: BuildState, action: Action, next: Next) -> ReduceResult:
    """Drop structurally invalid assembly actions before they reach the reducer."""
    if action.type in _GATED:
        errors = validate_action(action)
        if errors:
            logger.warning("builder: %s rejected, invalid assembly: %s", action.type, "; ".join(errors))
            return ReduceResult(
                state=state,
                applied=False,
                error=f"INVALID_ASSEMBLY: {'; '.join(errors)}",
            )
    return next(state, action)


def logging_middleware(state: BuildState, action: Action, next: Next) -> ReduceResult:
    """Log each action with before/after summaries of the build."""
    logger.debug("builder: before %s %s", action.type, summarize(state))

    result = next(state, action)

    if result.applied:
        logger.info(
            "builder: applied %s changed=%s %s",
            action.type,
            result.state != state,
            summarize(result.state),
        )
    else:
        logger.warning("builder: %s not applied: %s", action.type, result.error)
    for w in result.warnings:
        logger.warning("builder: %s %s", w.code, w.message)

    return result


def summarize(state: BuildState) -> dict:
    return {
        "selected_parts": dict(state.selected_parts),
        "parts_count": len(state.part_details),
        "assemblies_count": len(state.assemblies),
    }


DEFAULT_MIDDLEWARES: tuple[Middleware, ...] = (logging_middleware, validation_middleware)
