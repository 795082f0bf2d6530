"""Tests for the profile bag and store."""

import pytest

from daxgen import Job, LogicalFile, Namespace, Profile, Profiles
from daxgen.profiles import ProfileStore


class TestProfiles:

    def test_insertion_order(self):
        p = Profiles().set("selector", "grid.jobtype", "auxillary").set("env", "PATH", "/bin")
        assert list(p) == [
            Profile("selector", "grid.jobtype", "auxillary"),
            Profile("env", "PATH", "/bin"),
        ]

    def test_last_write_wins_without_moving(self):
        p = Profiles()
        p.set("selector", "execution.site", "CCG")
        p.set("selector", "pfn", "/usr/bin/keg")
        p.set("selector", "execution.site", "local")
        assert [(x.key, x.value) for x in p] == [("execution.site", "local"), ("pfn", "/usr/bin/keg")]
        assert len(p) == 2

    def test_same_key_in_different_namespaces_coexist(self):
        p = Profiles().set("env", "HOME", "/a").set("condor", "HOME", "/b")
        assert p.get("env", "HOME") == "/a"
        assert p.get("condor", "HOME") == "/b"

    def test_values_are_strings(self):
        p = Profiles().set(Namespace.PEGASUS, "clusters.size", 5)
        assert p.get("pegasus", "clusters.size") == "5"

    def test_by_namespace_and_remove(self):
        p = Profiles().set("selector", "a", "1").set("env", "b", "2").set("selector", "c", "3")
        assert p.by_namespace("selector") == {"a": "1", "c": "3"}
        p.remove("selector", "a")
        assert ("selector", "a") not in p

    def test_empty_key_rejected(self):
        with pytest.raises(ValueError):
            Profiles().set("selector", "", "x")


class TestProfileStore:

    def test_sets_on_any_owner(self):
        store = ProfileStore()
        job = Job("j1", "demo", "cat", "1.0")
        f = LogicalFile("f.a")
        store.set_profile(job, "selector", "execution.site", "CCG")
        store.set_profile(f, "pegasus", "checksum.type", "sha256")
        assert job.profiles.get("selector", "execution.site") == "CCG"
        assert store.profiles_of(f) == [Profile("pegasus", "checksum.type", "sha256")]

    def test_rejects_owner_without_profiles(self):
        with pytest.raises(TypeError):
            ProfileStore().set_profile(object(), "env", "A", "1")
