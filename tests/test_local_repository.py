"""Tests for manifest parsing and the local folder repository."""

import json
import os
import threading

import pytest

from constants import Constants
from repository import LocalUnitSource, RemoteUnitSource, open_repository
from repository.manifest import load_document
from units.errors import ArtifactNotFound, MalformedSpec, RepositoryUnavailable
from units.model import Capability, Requirement
from units.version import Version

IU = Constants.IU_NAMESPACE

MANIFEST = """
name: core
units:
  - id: org.example.core
    version: 1.0.0
    provides:
      - {namespace: java.package, name: org.example.api, version: 1.2.0}
    requires:
      - {namespace: osgi.bundle, name: org.example.util, range: "[1.0,2.0)"}
      - org.example.plain
      - {name: org.example.docs, optional: true, greedy: false}
    artifacts:
      - {classifier: osgi.bundle, id: org.example.core, version: 1.0.0,
         path: plugins/org.example.core_1.0.0.jar, singleton: true}
      - {classifier: org.eclipse.update.feature, id: org.example.feature, version: 1.0.0,
         path: features/org.example.feature_1.0.0.jar}
  - id: org.example.core
    version: 1.1
  - id: org.example.util
    version: 1.5.0.v2024
"""


def write_repo(folder, text=MANIFEST, filename="units.yaml"):
    folder.mkdir(parents=True, exist_ok=True)
    (folder / filename).write_text(text, encoding="utf-8")
    return folder


def touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"PK")


class TestManifestParsing:
    """Units read from units.yaml."""

    def test_units_in_declaration_order(self, tmp_path):
        source = LocalUnitSource(str(write_repo(tmp_path)))
        units = source.get_all_units()
        assert [(u.id, str(u.version)) for u in units] == [
            ("org.example.core", "1.0.0"),
            ("org.example.core", "1.1.0"),
            ("org.example.util", "1.5.0.v2024"),
        ]
        assert all(u.source is source for u in units)

    def test_requirement_defaults_and_flags(self, tmp_path):
        core = LocalUnitSource(str(write_repo(tmp_path))).get_all_units()[0]
        util, plain, docs = core.requirements
        assert util == Requirement("osgi.bundle", "org.example.util", "[1.0,2.0)")
        assert plain == Requirement(IU, "org.example.plain")
        assert docs.optional is True and docs.greedy is False

    def test_provided_capabilities_include_identity(self, tmp_path):
        core = LocalUnitSource(str(write_repo(tmp_path))).get_all_units()[0]
        assert Capability(IU, "org.example.core", "1.0.0") in core.provided
        assert Capability("java.package", "org.example.api", "1.2.0") in core.provided

    def test_name_from_manifest_used_in_description(self, tmp_path):
        source = LocalUnitSource(str(write_repo(tmp_path)))
        source.get_all_units()
        assert source.describe() == f"core@{tmp_path}"

    def test_json_manifest(self, tmp_path):
        write_repo(tmp_path, '{"units": [{"id": "a", "version": "2.0"}]}', "units.json")
        units = LocalUnitSource(str(tmp_path)).get_all_units()
        assert [(u.id, u.version) for u in units] == [("a", Version(2))]

    def test_manifest_file_path_accepted(self, tmp_path):
        write_repo(tmp_path, "units:\n  - {id: a, version: 1.0}\n", "custom.yml")
        units = LocalUnitSource(str(tmp_path / "custom.yml")).get_all_units()
        assert [u.id for u in units] == ["a"]

    def test_unquoted_versions_keep_their_digits(self, tmp_path):
        text = "units:\n  - id: a\n    version: 1.10\n    requires:\n      - {name: b, range: 1.20}\n"
        unit = LocalUnitSource(str(write_repo(tmp_path, text))).get_all_units()[0]
        assert unit.version == Version(1, 10)
        assert str(unit.requirements[0].range.minimum) == "1.20.0"

    def test_tab_indented_json_manifest(self, tmp_path):
        document = {"units": [{"id": "a", "version": "1.0", "requires": [{"name": "b"}]}]}
        write_repo(tmp_path, json.dumps(document, indent="\t"), "units.json")
        units = LocalUnitSource(str(tmp_path)).get_all_units()
        assert [(u.id, [r.name for r in u.requirements]) for u in units] == [("a", ["b"])]

    def test_json_numbers_are_not_rounded(self):
        document = load_document('{"units": [{"id": "a", "version": 1.10}]}', "repo/units.json")
        assert document["units"][0]["version"] == "1.10"

    def test_tab_indented_json_in_yaml_named_manifest(self):
        text = json.dumps({"name": "tabs", "units": []}, indent="\t")
        assert load_document(text, "repo/units.yaml")["name"] == "tabs"

    @pytest.mark.parametrize("text", [
        "units:\n  - {id: a}\n",
        "units:\n  - {id: a, version: 1.0, requires: [{name: b, range: '[1.0'}]}\n",
        "units:\n  - {id: a, version: 1.0, requires: [{name: b, optional: maybe}]}\n",
        "units:\n  - {id: a, version: 1.0, artifacts: [{classifier: osgi.bundle, id: a}]}\n",
        "units:\n  - just-a-string\n",
    ])
    def test_malformed_entries(self, tmp_path, text):
        source = LocalUnitSource(str(write_repo(tmp_path, text)))
        with pytest.raises(MalformedSpec):
            source.get_all_units()

    @pytest.mark.parametrize("text", ["units: [unclosed", "- a\n- b\n", "units: 3\n"])
    def test_unreadable_manifest_makes_repository_unavailable(self, tmp_path, text):
        source = LocalUnitSource(str(write_repo(tmp_path, text)))
        with pytest.raises(ArtifactNotFound):
            source.get_all_units()


class TestLocalUnitSource:
    """Folder lookup, memoization and artifact location."""

    def test_missing_folder(self, tmp_path):
        with pytest.raises(RepositoryUnavailable):
            LocalUnitSource(str(tmp_path / "nope")).get_all_units()

    def test_folder_without_manifest(self, tmp_path):
        with pytest.raises(ArtifactNotFound) as excinfo:
            LocalUnitSource(str(tmp_path)).get_all_units()
        assert not isinstance(excinfo.value, RepositoryUnavailable)

    def test_probe_reports_failure_instead_of_raising(self, tmp_path):
        result = LocalUnitSource(str(tmp_path / "nope")).probe(Requirement(IU, "a"))
        assert result.failed and not result.found
        assert "does not exist" in result.reason()

    def test_units_are_memoized(self, tmp_path):
        write_repo(tmp_path)
        source = LocalUnitSource(str(tmp_path))
        first = source.get_all_units()
        (tmp_path / "units.yaml").write_text("units: []\n", encoding="utf-8")
        assert source.get_all_units() is first

    def test_failed_load_is_retried(self, tmp_path):
        source = LocalUnitSource(str(tmp_path))
        with pytest.raises(ArtifactNotFound):
            source.get_all_units()
        write_repo(tmp_path)
        assert len(source.get_all_units()) == 3

    def test_concurrent_runs_share_one_load(self, tmp_path):
        write_repo(tmp_path)
        source = LocalUnitSource(str(tmp_path))
        loads = []
        real_load = source._load_units

        def counting_load():
            loads.append(threading.get_ident())
            return real_load()

        source._load_units = counting_load
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(source.get_all_units())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(loads) == 1
        assert len(results) == 8
        assert all(units is results[0] for units in results)

    def test_find_unit(self, tmp_path):
        source = LocalUnitSource(str(write_repo(tmp_path)))
        assert source.find_unit("org.example.core").version == Version(1, 1)
        assert source.find_unit("org.example.core", "1.0.0").version == Version(1)
        with pytest.raises(ArtifactNotFound):
            source.find_unit("org.example.core", "3.0")
        with pytest.raises(ArtifactNotFound):
            source.find_unit("unknown")

    def test_artifacts_located_relative_to_folder(self, tmp_path):
        write_repo(tmp_path)
        touch(tmp_path / "plugins" / "org.example.core_1.0.0.jar")
        touch(tmp_path / "features" / "org.example.feature_1.0.0.jar")
        core = LocalUnitSource(str(tmp_path)).get_all_units()[0]

        artifacts = core.resolve_artifacts()

        bundle = artifacts.bundles[0]
        assert bundle.location == os.path.join(str(tmp_path), "plugins", "org.example.core_1.0.0.jar")
        assert bundle.singleton is True
        assert [f.id for f in artifacts.features] == ["org.example.feature"]

    def test_missing_artifact_file(self, tmp_path):
        core = LocalUnitSource(str(write_repo(tmp_path))).get_all_units()[0]
        with pytest.raises(ArtifactNotFound, match="org.example.core:1.0.0"):
            core.resolve_artifacts()

    def test_equality_by_path(self, tmp_path):
        a = LocalUnitSource(str(tmp_path))
        b = LocalUnitSource(str(tmp_path / "." ))
        assert a == b
        assert hash(a) == hash(b)
        assert a != LocalUnitSource(str(tmp_path / "other"))


def test_open_repository_picks_variant(tmp_path):
    assert isinstance(open_repository("https://example.org/repo/units.json"), RemoteUnitSource)
    assert isinstance(open_repository(str(tmp_path)), LocalUnitSource)
