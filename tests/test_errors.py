"""Tests for the daxgen error hierarchy."""

import pytest

from daxgen.errors import (
    CyclicGraph,
    UnknownEntity,
    UnknownExecutable,
    UnknownFile,
    UnknownJob,
    WorkflowError,
)


@pytest.mark.parametrize("cls", [UnknownFile, UnknownExecutable, UnknownJob])
def test_unknown_errors_share_a_base(cls):
    assert issubclass(cls, UnknownEntity)
    assert issubclass(cls, WorkflowError)


def test_str_includes_kind_and_details():
    e = UnknownJob("Job 'x' is not declared", job="x")
    assert str(e) == "UnknownJob: Job 'x' is not declared\njob=x"
    assert e.message == "Job 'x' is not declared"


def test_cyclic_graph_carries_path():
    e = CyclicGraph("cycle", cycle=["a", "b", "a"])
    assert e.cycle == ["a", "b", "a"]
    assert e.details["cycle"] == "a -> b -> a"
