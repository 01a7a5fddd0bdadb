"""Packaging of the demonstration WASI module as an importable OCI image tarball."""

from __future__ import annotations

import os
import tarfile
from pathlib import Path

from wasmbundle.tarbuilder import Builder, sha256_file

__all__ = ["build_image", "IMAGE_NAME", "APP_NAME"]

IMAGE_NAME = "ghcr.io/containerd/runwasi/wasi-demo-app:latest"
APP_NAME = "wasi-demo-app.wasm"


def build_image(
    app_path: str | os.PathLike[str], out_dir: str | os.PathLike[str]
) -> Path:
    """Wrap the module at ``app_path`` in a one-layer image; return the path of img.tar."""
    app_path = Path(app_path)
    out_dir = Path(out_dir)
    if not app_path.is_file():
        raise FileNotFoundError(f"module not found: {app_path}")
    out_dir.mkdir(parents=True, exist_ok=True)

    layer_path = out_dir / "layer.tar"
    with tarfile.open(layer_path, "w", format=tarfile.GNU_FORMAT) as layer:
        layer.add(app_path, arcname=APP_NAME)

    config = {
        "architecture": "wasm",
        "os": "wasi",
        "config": {"Entrypoint": ["/" + APP_NAME]},
        "rootfs": {"type": "layers", "diff_ids": ["sha256:" + sha256_file(layer_path)]},
    }

    image_path = out_dir / "img.tar"
    builder = Builder().add_layer(layer_path).add_config(config, IMAGE_NAME)
    with open(image_path, "wb") as handle:
        builder.build(handle)
    return image_path