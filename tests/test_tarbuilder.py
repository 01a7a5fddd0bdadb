import hashlib
import io
import json
import tarfile

import pytest

from wasmbundle.tarbuilder import (
    ANNOTATION_IMAGE_NAME,
    ANNOTATION_REF_NAME,
    MEDIA_TYPE_CONFIG,
    MEDIA_TYPE_INDEX,
    MEDIA_TYPE_LAYER,
    MEDIA_TYPE_MANIFEST,
    SCHEMA_VERSION,
    Builder,
    sha256_file,
)

IMAGE_NAME = "ghcr.io/containerd/runwasi/wasi-demo-app:latest"


def _read(data):
    with tarfile.open(fileobj=io.BytesIO(data)) as tar:
        return {m.name: (m, tar.extractfile(m).read()) for m in tar.getmembers()}


def _layer(tmp_path, content=b"layer contents"):
    path = tmp_path / "layer.tar"
    path.write_bytes(content)
    return path


def _config(diff_ids):
    return {
        "architecture": "wasm",
        "os": "wasi",
        "rootfs": {"type": "layers", "diff_ids": diff_ids},
    }


def _build(builder):
    out = io.BytesIO()
    builder.build(out)
    return _read(out.getvalue())


def test_full_image_layout(tmp_path):
    layer = _layer(tmp_path)
    digest = sha256_file(layer)
    builder = Builder().add_layer(layer).add_config(_config(["sha256:" + digest]), IMAGE_NAME)
    entries = _build(builder)

    layer_path = "blobs/sha256/" + digest
    assert entries[layer_path][1] == b"layer contents"
    assert entries[layer_path][0].mode == 0o444

    for name, (member, content) in entries.items():
        if name.startswith("blobs/sha256/"):
            assert hashlib.sha256(content).hexdigest() == name.rsplit("/", 1)[1]

    assert json.loads(entries["oci-layout"][1]) == {"imageLayoutVersion": "1.0.0"}
    assert entries["index.json"][0].mode == 0o644

    index = json.loads(entries["index.json"][1])
    assert index["schemaVersion"] == SCHEMA_VERSION
    assert index["mediaType"] == MEDIA_TYPE_INDEX
    (desc,) = index["manifests"]
    assert desc["mediaType"] == MEDIA_TYPE_MANIFEST
    assert desc["platform"] == {"architecture": "wasm", "os": "wasi"}
    assert desc["annotations"][ANNOTATION_REF_NAME] == "latest"
    assert desc["annotations"][ANNOTATION_IMAGE_NAME] == IMAGE_NAME

    manifest_bytes = entries["blobs/sha256/" + desc["digest"][len("sha256:"):]][1]
    assert desc["size"] == len(manifest_bytes)
    manifest = json.loads(manifest_bytes)
    assert manifest["config"]["mediaType"] == MEDIA_TYPE_CONFIG
    assert manifest["layers"] == [
        {"mediaType": MEDIA_TYPE_LAYER, "digest": "sha256:" + digest, "size": layer.stat().st_size}
    ]
    config_blob = entries["blobs/sha256/" + manifest["config"]["digest"][len("sha256:"):]][1]
    assert json.loads(config_blob) == _config(["sha256:" + digest])

    docker = json.loads(entries["manifest.json"][1])
    assert docker == [
        {
            "Config": "blobs/sha256/" + manifest["config"]["digest"][len("sha256:"):],
            "RepoTags": [IMAGE_NAME],
            "Layers": [layer_path],
        }
    ]


def test_more_than_one_config_is_rejected():
    builder = Builder().add_config(_config([]), "a").add_config(_config([]), "b")
    with pytest.raises(ValueError, match="only one config is supported"):
        builder.build(io.BytesIO())


def test_no_config_gives_empty_index():
    entries = _build(Builder())
    assert json.loads(entries["index.json"][1])["manifests"] == []
    assert json.loads(entries["manifest.json"][1]) == [{"Config": "", "RepoTags": [], "Layers": []}]


def test_name_without_tag_has_no_ref_annotation():
    entries = _build(Builder().add_config(_config([]), "plainname"))
    (desc,) = json.loads(entries["index.json"][1])["manifests"]
    assert desc["annotations"] == {ANNOTATION_IMAGE_NAME: "plainname"}


def test_layer_not_in_diff_ids_is_stored_but_not_referenced(tmp_path):
    layer = _layer(tmp_path)
    entries = _build(Builder().add_layer(layer).add_config(_config([]), IMAGE_NAME))
    assert "blobs/sha256/" + sha256_file(layer) in entries
    (desc,) = json.loads(entries["index.json"][1])["manifests"]
    manifest = json.loads(entries["blobs/sha256/" + desc["digest"][len("sha256:"):]][1])
    assert manifest["layers"] == []


def test_missing_layer_file_raises(tmp_path):
    builder = Builder().add_layer(tmp_path / "absent.tar")
    with pytest.raises(FileNotFoundError):
        builder.build(io.BytesIO())


def test_config_without_platform_is_rejected():
    builder = Builder().add_config({"rootfs": {"type": "layers", "diff_ids": []}}, IMAGE_NAME)
    with pytest.raises(ValueError, match="os and architecture"):
        builder.build(io.BytesIO())


def test_sha256_file_matches_hashlib(tmp_path):
    path = _layer(tmp_path, b"x" * 200000)
    assert sha256_file(path) == hashlib.sha256(b"x" * 200000).hexdigest()