"""Tests for daxgen.workflow.Workflow (the job graph)."""

import pytest

from daxgen import Dependency, Job, Link, Workflow, lfn
from daxgen.errors import ConfigError, DuplicateEdge, DuplicateJobId, UnknownJob


def _job(job_id, inputs=(), outputs=()):
    j = Job(job_id, "demo", "cat", "1.0")
    for f in inputs:
        j.uses(f, Link.INPUT)
    for f in outputs:
        j.uses(f, Link.OUTPUT)
    return j


class TestJobs:

    def test_add_job_is_chainable(self):
        wf = Workflow("w")
        assert wf.add_job(_job("a")).add_job(_job("b")) is wf
        assert [j.id for j in wf.jobs] == ["a", "b"]
        assert "a" in wf and len(wf) == 2

    def test_duplicate_job_id(self):
        wf = Workflow("w").add_job(_job("a"))
        with pytest.raises(DuplicateJobId):
            wf.add_job(_job("a"))

    def test_unknown_job_lookup(self):
        with pytest.raises(UnknownJob):
            Workflow("w").job("missing")

    def test_add_profile_by_job_id(self):
        wf = Workflow("w").add_job(_job("a"))
        wf.add_profile("a", "selector", "execution.site", "CCG")
        assert wf.job("a").profiles.get("selector", "execution.site") == "CCG"


class TestExplicitDependencies:

    def test_edges_keep_insertion_order(self):
        wf = Workflow("w", dependency_policy="explicit").add_jobs(_job("a"), _job("b"), _job("c"))
        wf.add_dependency("b", "c").add_dependency("a", "b")
        assert wf.dependencies() == [Dependency("b", "c"), Dependency("a", "b")]
        assert wf.parents("c") == ["b"]
        assert wf.children("a") == ["b"]

    def test_accepts_job_objects(self):
        a, b = _job("a"), _job("b")
        wf = Workflow("w").add_jobs(a, b).add_dependency(a, b)
        assert wf.explicit_dependencies == [Dependency("a", "b")]

    def test_unknown_endpoint_leaves_graph_unchanged(self):
        wf = Workflow("w").add_jobs(_job("a"), _job("b")).add_dependency("a", "b")
        before = wf.explicit_dependencies
        for parent, child in [("a", "zzz"), ("zzz", "b"), ("x", "y")]:
            with pytest.raises(UnknownJob):
                wf.add_dependency(parent, child)
        assert wf.explicit_dependencies == before

    def test_duplicate_edge(self):
        wf = Workflow("w").add_jobs(_job("a"), _job("b")).add_dependency("a", "b")
        with pytest.raises(DuplicateEdge):
            wf.add_dependency("a", "b")
        assert len(wf.explicit_dependencies) == 1

    def test_explicit_policy_ignores_usage(self):
        wf = Workflow("w", dependency_policy="explicit")
        wf.add_jobs(_job("a", outputs=["f.x"]), _job("b", inputs=["f.x"]))
        assert wf.dependencies() == []


class TestInferredDependencies:

    def test_producer_consumer_pairs(self):
        wf = Workflow("w", dependency_policy="inferred")
        wf.add_jobs(
            _job("split", inputs=["in"], outputs=["p1", "p2"]),
            _job("left", inputs=["p1"], outputs=["r1"]),
            _job("right", inputs=["p2"], outputs=["r2"]),
            _job("merge", inputs=["r1", "r2", "in"], outputs=["out"]),
        )
        assert wf.dependencies() == [
            Dependency("split", "left"),
            Dependency("split", "right"),
            Dependency("left", "merge"),
            Dependency("right", "merge"),
        ]

    def test_explicit_edges_first_then_new_inferred(self):
        wf = Workflow("w", dependency_policy="inferred")
        wf.add_jobs(_job("a", outputs=["f"]), _job("b", inputs=["f"]), _job("c"))
        wf.add_dependency("c", "b").add_dependency("a", "b")
        assert wf.dependencies() == [Dependency("c", "b"), Dependency("a", "b")]

    def test_consumer_before_producer_in_job_order(self):
        wf = Workflow("w", dependency_policy="inferred")
        wf.add_jobs(_job("late", inputs=["f"]), _job("early", outputs=["f"]))
        assert wf.inferred_dependencies() == [Dependency("early", "late")]

    def test_file_with_no_producer_adds_nothing(self):
        wf = Workflow("w").add_jobs(_job("a", inputs=["raw"]), _job("b", inputs=["raw"]))
        assert wf.inferred_dependencies() == []


class TestPolicy:

    def test_unknown_policy(self):
        with pytest.raises(ConfigError):
            Workflow("w", dependency_policy="transitive")

    def test_empty_name(self):
        with pytest.raises(ValueError):
            Workflow("")

    def test_entities_through_workflow(self):
        wf = Workflow("w")
        f = wf.declare_file("f.a")
        e = wf.declare_executable("demo", "cat", "1.0")
        wf.add_file(lfn("f.b"))
        assert wf.files[0] is f
        assert wf.executables == [e]
        assert [x.name for x in wf.files] == ["f.a", "f.b"]
