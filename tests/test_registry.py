"""Tests for daxgen.registry.EntityRegistry."""

import pytest

from daxgen import Executable, LogicalFile
from daxgen.errors import DuplicateDeclaration, UnknownEntity, UnknownExecutable, UnknownFile
from daxgen.registry import EntityRegistry


class TestFiles:

    def test_declare_and_lookup(self):
        reg = EntityRegistry()
        f = reg.declare_file("f.a")
        assert reg.get_file("f.a") is f
        assert reg.has_file("f.a")

    def test_add_physical_mapping(self):
        reg = EntityRegistry()
        reg.declare_file("f.a")
        reg.add_physical_mapping("f.a", "file:///data/f.a", "local")
        assert reg.get_file("f.a").pfns[0].url == "file:///data/f.a"

    def test_duplicate_file(self):
        reg = EntityRegistry()
        reg.add_file(LogicalFile("f.a"))
        with pytest.raises(DuplicateDeclaration) as exc:
            reg.declare_file("f.a")
        assert exc.value.details["file"] == "f.a"

    def test_unknown_file(self):
        reg = EntityRegistry()
        with pytest.raises(UnknownFile):
            reg.get_file("nope")
        with pytest.raises(UnknownEntity):
            reg.add_physical_mapping("nope", "file:///x")

    def test_files_in_declaration_order(self):
        reg = EntityRegistry()
        for name in ["z", "a", "m"]:
            reg.declare_file(name)
        assert [f.name for f in reg.files] == ["z", "a", "m"]


class TestExecutables:

    def test_identity_is_the_triple(self):
        reg = EntityRegistry()
        reg.declare_executable("pegasus", "analyze", "4.0")
        reg.declare_executable("pegasus", "analyze", "4.1")
        reg.declare_executable("other", "analyze", "4.0")
        assert len(reg.executables) == 3

    def test_duplicate_executable(self):
        reg = EntityRegistry()
        reg.add_executable(Executable("pegasus", "analyze", "4.0"))
        with pytest.raises(DuplicateDeclaration):
            reg.add_executable(Executable("pegasus", "analyze", "4.0", installed=False))

    def test_unknown_executable(self):
        reg = EntityRegistry()
        reg.declare_executable("pegasus", "analyze", "4.0")
        with pytest.raises(UnknownExecutable) as exc:
            reg.get_executable("pegasus", "analyze", "5.0")
        assert exc.value.details["executable"] == "pegasus::analyze:5.0"
