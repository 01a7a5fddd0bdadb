"""Assembly of an OCI image layout tarball that container runtimes can import."""

from __future__ import annotations

import hashlib
import io
import json
import os
import tarfile
from pathlib import Path
from typing import Any, BinaryIO, Mapping

__all__ = [
    "Builder",
    "SCHEMA_VERSION",
    "MEDIA_TYPE_LAYER",
    "MEDIA_TYPE_CONFIG",
    "MEDIA_TYPE_MANIFEST",
    "MEDIA_TYPE_INDEX",
    "ANNOTATION_REF_NAME",
    "ANNOTATION_IMAGE_NAME",
    "sha256_file",
]

SCHEMA_VERSION = 2
MEDIA_TYPE_LAYER = "application/vnd.oci.image.layer.v1.tar"
MEDIA_TYPE_CONFIG = "application/vnd.oci.image.config.v1+json"
MEDIA_TYPE_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
MEDIA_TYPE_INDEX = "application/vnd.oci.image.index.v1+json"

ANNOTATION_REF_NAME = "org.opencontainers.image.ref.name"
ANNOTATION_IMAGE_NAME = "io.containerd.image.name"

IMAGE_LAYOUT_VERSION = "1.0.0"
_BLOB_DIR = "blobs/sha256/"
_BLOB_MODE = 0o444
_META_MODE = 0o644
_CHUNK = 1 << 16


def sha256_file(path: str | os.PathLike[str]) -> str:
    """Return the hex SHA-256 digest of a file's contents."""
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _to_json(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def _append(tar: tarfile.TarFile, name: str, size: int, mode: int, data: BinaryIO) -> None:
    info = tarfile.TarInfo(name)
    info.size = size
    info.mode = mode
    tar.addfile(info, data)


def _append_bytes(tar: tarfile.TarFile, name: str, data: bytes, mode: int) -> None:
    _append(tar, name, len(data), mode, io.BytesIO(data))


class Builder:
    """Collects image configurations and layer files and writes them as one tarball."""

    def __init__(self) -> None:
        self.configs: list[tuple[Mapping[str, Any], str]] = []
        self.layers: list[Path] = []

    def add_config(self, config: Mapping[str, Any], name: str) -> "Builder":
        """Add an image configuration (OCI config JSON as a mapping) under an image name."""
        self.configs.append((config, name))
        return self

    def add_layer(self, layer: str | os.PathLike[str]) -> "Builder":
        """Add a layer tarball by path."""
        self.layers.append(Path(layer))
        return self

    def build(self, w: BinaryIO) -> None:
        """Write the OCI layout (plus a Docker-style manifest.json) to a binary stream."""
        if len(self.configs) > 1:
            raise ValueError("only one config is supported")

        docker_manifest: dict[str, Any] = {"Config": "", "RepoTags": [], "Layers": []}
        layer_descriptors: dict[str, dict[str, Any]] = {}
        manifests: list[dict[str, Any]] = []

        with tarfile.open(fileobj=w, mode="w", format=tarfile.GNU_FORMAT) as tar:
            for layer in self.layers:
                digest = sha256_file(layer)
                size = os.stat(layer).st_size
                oci_digest = "sha256:" + digest
                layer_descriptors[oci_digest] = {
                    "mediaType": MEDIA_TYPE_LAYER,
                    "digest": oci_digest,
                    "size": size,
                }
                path = _BLOB_DIR + digest
                with open(layer, "rb") as handle:
                    _append(tar, path, size, _BLOB_MODE, handle)
                docker_manifest["Layers"].append(path)

            for config, name in self.configs:
                manifests.append(
                    self._write_image(tar, config, name, layer_descriptors, docker_manifest)
                )

            index = {
                "schemaVersion": SCHEMA_VERSION,
                "mediaType": MEDIA_TYPE_INDEX,
                "manifests": manifests,
            }
            _append_bytes(tar, "index.json", _to_json(index), _META_MODE)
            _append_bytes(
                tar,
                "oci-layout",
                _to_json({"imageLayoutVersion": IMAGE_LAYOUT_VERSION}),
                _META_MODE,
            )
            _append_bytes(tar, "manifest.json", _to_json([docker_manifest]), _META_MODE)

    @staticmethod
    def _write_image(
        tar: tarfile.TarFile,
        config: Mapping[str, Any],
        name: str,
        layer_descriptors: Mapping[str, dict[str, Any]],
        docker_manifest: dict[str, Any],
    ) -> dict[str, Any]:
        if "os" not in config or "architecture" not in config:
            raise ValueError("image configuration needs os and architecture")

        config_bytes = _to_json(config)
        config_digest = hashlib.sha256(config_bytes).hexdigest()
        config_path = _BLOB_DIR + config_digest
        _append_bytes(tar, config_path, config_bytes, _BLOB_MODE)
        docker_manifest["Config"] = config_path

        config_descriptor = {
            "mediaType": MEDIA_TYPE_CONFIG,
            "digest": "sha256:" + config_digest,
            "size": len(config_bytes),
        }

        diff_ids = (config.get("rootfs") or {}).get("diff_ids") or []
        layers = [dict(layer_descriptors[i]) for i in diff_ids if i in layer_descriptors]

        annotations: dict[str, str] = {}
        if ":" in name:
            annotations[ANNOTATION_REF_NAME] = name.split(":")[1]
        docker_manifest["RepoTags"].append(name)
        annotations[ANNOTATION_IMAGE_NAME] = name

        manifest = {
            "schemaVersion": SCHEMA_VERSION,
            "mediaType": MEDIA_TYPE_MANIFEST,
            "config": config_descriptor,
            "layers": layers,
            "annotations": dict(annotations),
        }
        manifest_bytes = _to_json(manifest)
        manifest_digest = hashlib.sha256(manifest_bytes).hexdigest()
        _append_bytes(tar, _BLOB_DIR + manifest_digest, manifest_bytes, _BLOB_MODE)

        return {
            "mediaType": MEDIA_TYPE_MANIFEST,
            "digest": "sha256:" + manifest_digest,
            "size": len(manifest_bytes),
            "annotations": annotations,
            "platform": {
                "architecture": config["architecture"],
                "os": config["os"],
            },
        }