# tests/core/binding/test_trace.py
"""
Testes da máquina de estados de um bind.

    UNRESOLVED → TARGET_RESOLVED → STRATEGY_MATCHED → BOUND
    (qualquer estado não terminal) → FAILED
"""

import pytest

from manifest_resolver.core.binding.trace import BindState, BindTrace
from manifest_resolver.core.exceptions import NoCompatibleBinderError


def _trace():
    return BindTrace(source="worker", bind_index=0, capability="queue:sqs", access="read")


def test_happy_path_records_history():
    trace = _trace()
    trace.target_resolved("requests-queue")
    trace.strategy_matched("ComputeToSqsStrategy")
    trace.bound()
    assert trace.state is BindState.BOUND
    assert trace.history == ["UNRESOLVED", "TARGET_RESOLVED", "STRATEGY_MATCHED", "BOUND"]
    out = trace.to_dict()
    assert out["target"] == "requests-queue"
    assert "error" not in out


def test_failure_records_error():
    trace = _trace()
    trace.target_resolved("requests-queue")
    trace.fail(NoCompatibleBinderError("no binder"))
    assert trace.state is BindState.FAILED
    assert trace.history[-1] == "FAILED"
    assert trace.to_dict()["error"] == {"code": "NO_COMPATIBLE_BINDER", "message": "no binder"}


def test_skipping_a_state_is_rejected():
    trace = _trace()
    with pytest.raises(RuntimeError):
        trace.bound()


def test_terminal_states_cannot_fail():
    trace = _trace()
    trace.fail(NoCompatibleBinderError("x"))
    with pytest.raises(RuntimeError):
        trace.fail(NoCompatibleBinderError("y"))
