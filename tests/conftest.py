import gzip
import io
import json
import tarfile

import pytest


def _build_unitypackage(groups, extra_dirs=True):
    """groups: list of (guid, {part_name: bytes})."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for guid, parts in groups:
            if extra_dirs:
                info = tarfile.TarInfo(f"./{guid}/")
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            for part, content in parts.items():
                info = tarfile.TarInfo(f"./{guid}/{part}")
                info.size = len(content)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(content))
    return gzip.compress(buffer.getvalue())


@pytest.fixture
def make_unitypackage():
    return _build_unitypackage


@pytest.fixture
def manifest_bytes():
    return json.dumps({"name": "com.example.pkg", "version": "1.2.3"}, indent=2).encode("utf-8")
