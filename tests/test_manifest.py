from pathlib import Path

import pytest

from upmconv.errors import ManifestReadError
from upmconv.manifest.package_manifest import load_manifest, parse_manifest, root_dir_name


def test_load_manifest_keeps_raw_bytes(tmp_path: Path, manifest_bytes):
    path = tmp_path / "package.json"
    path.write_bytes(manifest_bytes)
    manifest = load_manifest(path)
    assert manifest.raw == manifest_bytes
    assert manifest.name == "com.example.pkg"
    assert manifest.version == "1.2.3"


def test_missing_manifest_file(tmp_path: Path):
    with pytest.raises(ManifestReadError):
        load_manifest(tmp_path / "nope.json")


@pytest.mark.parametrize(
    "raw",
    [b"", b"   \n", b"{not json", b"[1, 2]", b'{"version": "1.0.0"}', b'{"name": "  "}'],
)
def test_invalid_manifests(raw):
    with pytest.raises(ManifestReadError):
        parse_manifest(raw)


def test_json_error_reports_location():
    with pytest.raises(ManifestReadError) as excinfo:
        parse_manifest(b'{\n  "name": \n}', "pkg.json")
    assert "line 3" in str(excinfo.value)
    assert "pkg.json" in str(excinfo.value)


def test_root_dir_name_formats():
    manifest = parse_manifest(b'{"name": "com.example.pkg", "version": "0.1.0"}')
    assert root_dir_name(manifest) == "com.example.pkg"
    assert root_dir_name(manifest, "{name}@{version}") == "com.example.pkg@0.1.0"


def test_root_dir_name_requires_version_when_formatted():
    manifest = parse_manifest(b'{"name": "com.example.pkg"}')
    with pytest.raises(ManifestReadError):
        root_dir_name(manifest, "{name}@{version}")


@pytest.mark.parametrize("name", ["@scope/pkg", "a\\\\b", ".", ".."])
def test_root_dir_name_rejects_unsafe_names(name):
    manifest = parse_manifest(('{"name": "%s"}' % name).encode("utf-8"))
    with pytest.raises(ManifestReadError):
        root_dir_name(manifest)
