# blackdiamond_workflow.py
# Diamond workflow whose jobs carry selector hints (site, job type, pfn)
from __future__ import annotations

import os
from pathlib import Path

from daxgen import Arch, Executable, Job, Link, OS, Workflow, lfn


def workflow(pegasus_location: str | None = None, cwd: str | None = None) -> Workflow:
    pegasus_location = pegasus_location or os.environ.get("PEGASUS_HOME", "/usr")
    cwd = cwd or str(Path(".").resolve())

    dax = Workflow("blackdiamond")

    fa = lfn("f.a", f"file://{cwd}/f.a")
    fb1, fb2 = lfn("f.b1"), lfn("f.b2")
    fc1, fc2 = lfn("f.c1"), lfn("f.c2")
    fd = lfn("f.d", register=True)
    dax.add_files(fa, fb1, fb2, fc1, fc2, fd)

    # fake preprocess and findrange so the selector pfn hints get picked up
    preprocess = Executable("pegasus", "preprocess", "4.0")
    preprocess.set_architecture(Arch.X86_64).set_os(OS.LINUX).set_installed(False)
    preprocess.add_physical_file(f"file://{pegasus_location}/bin/pegasus-keg-fake", "local")

    findrange = Executable("pegasus", "findrange", "4.0")
    findrange.set_architecture(Arch.X86_64).set_os(OS.LINUX).set_installed(False)
    findrange.add_physical_file(f"file://{pegasus_location}/bin/pegasus-keg-fake", "local")

    analyze = Executable("pegasus", "analyze", "4.0")
    analyze.set_architecture(Arch.X86_64).set_os(OS.LINUX).set_installed(False)
    analyze.add_physical_file(f"file://{pegasus_location}/bin/pegasus-keg", "local")

    dax.add_executables(preprocess, findrange, analyze)

    j1 = Job.of("j1", preprocess)
    j1.add_argument("-o ", fb1, " -o ", fb2)
    j1.uses(fa, Link.INPUT).uses(fb1, Link.OUTPUT).uses(fb2, Link.OUTPUT)
    j1.add_profile("selector", "grid.jobtype", "auxillary")
    j1.add_profile("selector", "execution.site", "CCG")
    j1.add_profile("selector", "pfn", "/usr/bin/pegasus-keg")

    j2 = Job.of("j2", findrange)
    j2.add_argument("-a findrange -T 10 -i ", fb1, " -o ", fc1)
    j2.uses(fb1, Link.INPUT).uses(fc1, Link.OUTPUT)
    j2.add_profile("selector", "grid.jobtype", "auxillary")
    j2.add_profile("selector", "execution.site", "CCG")
    j2.add_profile("selector", "pfn", "/opt/pegasus/bin/pegasus-keg")

    j3 = Job.of("j3", findrange)
    j3.add_argument("-a findrange -T 10 -i ", fb2, " -o ", fc2)
    j3.uses(fb2, Link.INPUT).uses(fc2, Link.OUTPUT)
    j3.add_profile("selector", "grid.jobtype", "auxillary")
    j3.add_profile("selector", "execution.site", "CCG")
    j3.add_profile("selector", "pfn", "/opt/pegasus/bin/pegasus-keg")

    j4 = Job.of("j4", analyze)
    j4.add_argument("-a analyze -T 10 -i ", fc1, " ", fc2, " -o ", fd)
    j4.uses(fc1, Link.INPUT).uses(fc2, Link.INPUT).uses(fd, Link.OUTPUT)
    j4.add_profile("selector", "execution.site", "CCG")
    j4.add_profile("selector", "pfn", "/opt/pegasus/bin/pegasus-keg")
    j4.add_profile("selector", "grid.jobtype", "auxillary")

    dax.add_jobs(j1, j2, j3, j4)

    dax.add_dependency("j1", "j2")
    dax.add_dependency("j1", "j3")
    dax.add_dependency("j2", "j4")
    dax.add_dependency("j3", "j4")

    return dax
