"""
Sauron Middleware Tests

Covers:
  - compose runs middlewares outermost-first, then the reducer
  - a middleware can short-circuit by not calling next
  - validation_middleware drops malformed assemblies without calling the reducer
  - logging_middleware logs applied and rejected actions
"""

import logging
from functools import partial

from sauron.kernel import actions
from sauron.kernel.middleware import compose, logging_middleware, validation_middleware
from sauron.kernel.reducer import reduce
from sauron.kernel.types import ReduceResult

TS = "2026-01-15T12:00:00Z"


def malformed_bcg():
    return {
        "id": "bcg",
        "type": "ASSEMBLY",
        "name": "Bolt Carrier Group",
        "category_id": "bcg-category",
        "subcomponents": [
            {"category_id": "bolt", "part_id": "bolt-mil-spec", "is_replaceable": True},
            {"category_id": "carrier", "is_replaceable": True},
        ],
    }


class TestCompose:
    def test_order_and_passthrough(self, empty):
        calls = []

        def outer(state, action, next):
            calls.append("outer")
            return next(state, action)

        def inner(state, action, next):
            calls.append("inner")
            return next(state, action)

        def base(state, action):
            calls.append("reducer")
            return ReduceResult(state=state, applied=True)

        compose(outer, inner)(base)(empty, actions.clear_build())
        assert calls == ["outer", "inner", "reducer"]

    def test_short_circuit(self, empty):
        called = []

        def stop(state, action, next):
            return ReduceResult(state=state, applied=False, error="STOPPED: test")

        def base(state, action):
            called.append(action)
            return ReduceResult(state=state, applied=True)

        r = compose(stop)(base)(empty, actions.clear_build())
        assert not r.applied
        assert called == []

    def test_no_middlewares_is_reducer(self, empty, barrel):
        pipeline = compose()(reduce)
        r = pipeline(empty, actions.add_part("barrel", barrel, timestamp=TS))
        assert r.applied


class TestValidationMiddleware:
    def test_malformed_assembly_never_reaches_reducer(self, empty):
        called = []

        def base(state, action):
            called.append(action)
            return ReduceResult(state=state, applied=True)

        r = compose(validation_middleware)(base)(empty, actions.add_assembly(malformed_bcg()))
        assert called == []
        assert not r.applied
        assert r.error.startswith("INVALID_ASSEMBLY")
        assert r.state is empty

    def test_malformed_assembly_leaves_populated_state_identical(self, empty, barrel, catalog):
        pipeline = compose(validation_middleware)(partial(reduce, catalog=catalog))
        state = pipeline(empty, actions.add_part("barrel", barrel, timestamp=TS)).state
        before = state.to_dict()
        r = pipeline(state, actions.add_assembly(malformed_bcg(), timestamp=TS))
        assert not r.applied
        assert r.state.to_dict() == before

    def test_valid_assembly_passes(self, empty, bcg, catalog):
        pipeline = compose(validation_middleware)(partial(reduce, catalog=catalog))
        r = pipeline(empty, actions.add_assembly(bcg, timestamp=TS))
        assert r.applied


class TestLoggingMiddleware:
    def test_logs_applied_action(self, empty, barrel, caplog):
        pipeline = compose(logging_middleware)(reduce)
        with caplog.at_level(logging.DEBUG, logger="sauron.kernel.middleware"):
            pipeline(empty, actions.add_part("barrel", barrel, timestamp=TS))
        messages = [rec.getMessage() for rec in caplog.records]
        assert any("before part.add" in m for m in messages)
        assert any("applied part.add changed=True" in m for m in messages)

    def test_logs_rejection_and_warnings(self, empty, bcg, caplog):
        pipeline = compose(logging_middleware)(reduce)
        with caplog.at_level(logging.WARNING, logger="sauron.kernel.middleware"):
            pipeline(empty, actions.remove_part("barrel", timestamp=TS))
            pipeline(empty, actions.add_assembly(bcg, timestamp=TS))  # no catalog
        messages = [rec.getMessage() for rec in caplog.records]
        assert any("part.remove not applied: NOT_FOUND" in m for m in messages)
        assert sum("UNRESOLVED_SUBCOMPONENT" in m for m in messages) == 2
