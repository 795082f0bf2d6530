"""Shared fixtures for daxgen tests."""

from pathlib import Path

import pytest

from daxgen import Executable, Job, Link, Workflow, lfn
from daxgen.config import Settings, set_settings

REPO_ROOT = Path(__file__).resolve().parent.parent
DAX_NS = {"dax": "http://pegasus.isi.edu/schema/DAX"}


@pytest.fixture(autouse=True)
def default_settings():
    """Isolate every test from DAXGEN_* variables in the environment."""
    set_settings(Settings())
    yield
    set_settings(None)


def build_diamond(policy=None) -> Workflow:
    """f.a -> j1 -> (j2, j3) -> j4 -> f.d, with explicit edges."""
    dax = Workflow("diamond", dependency_policy=policy)

    fa = lfn("f.a", "file:///work/f.a")
    fb1, fb2, fc1, fc2 = lfn("f.b1"), lfn("f.b2"), lfn("f.c1"), lfn("f.c2")
    fd = lfn("f.d", register=True)
    dax.add_files(fa, fb1, fb2, fc1, fc2, fd)

    preprocess = Executable("pegasus", "preprocess", "4.0", installed=False)
    preprocess.add_physical_file("file:///opt/pegasus/bin/pegasus-keg", "local")
    findrange = Executable("pegasus", "findrange", "4.0", installed=False)
    findrange.add_physical_file("file:///opt/pegasus/bin/pegasus-keg", "local")
    analyze = Executable("pegasus", "analyze", "4.0", installed=False)
    analyze.add_physical_file("file:///opt/pegasus/bin/pegasus-keg", "local")
    dax.add_executables(preprocess, findrange, analyze)

    j1 = Job.of("j1", preprocess).add_argument("-o ", fb1, " -o ", fb2)
    j1.uses(fa, Link.INPUT).uses(fb1, Link.OUTPUT).uses(fb2, Link.OUTPUT)
    j1.add_profile("selector", "grid.jobtype", "auxillary")

    j2 = Job.of("j2", findrange).add_argument("-a findrange -T 10 -i ", fb1, " -o ", fc1)
    j2.uses(fb1, Link.INPUT).uses(fc1, Link.OUTPUT)
    j2.add_profile("selector", "execution.site", "CCG")

    j3 = Job.of("j3", findrange).add_argument("-a findrange -T 10 -i ", fb2, " -o ", fc2)
    j3.uses(fb2, Link.INPUT).uses(fc2, Link.OUTPUT)

    j4 = Job.of("j4", analyze).add_argument("-a analyze -T 10 -i ", fc1, " ", fc2, " -o ", fd)
    j4.uses(fc1, Link.INPUT).uses(fc2, Link.INPUT).uses(fd, Link.OUTPUT)
    j4.add_profile("selector", "pfn", "/opt/pegasus/bin/pegasus-keg")

    dax.add_jobs(j1, j2, j3, j4)
    dax.add_dependency("j1", "j2")
    dax.add_dependency("j1", "j3")
    dax.add_dependency("j2", "j4")
    dax.add_dependency("j3", "j4")
    return dax


@pytest.fixture
def diamond():
    return build_diamond()


@pytest.fixture
def cat():
    return Executable("demo", "cat", "1.0")
