# wasmbundle

Tools for packaging WASI modules as OCI images and for the pieces around
running them: sandbox manager messages, a service dispatch table,
runtime-spec helpers and standard-stream redirection.

It has no dependencies outside the standard library.

## Modules

### `wasmbundle.tarbuilder`

`Builder` writes an OCI image layout as a tar archive (GNU format):

- `add_layer(path)` adds a layer tarball; `add_config(config, name)` adds an
  image configuration (the OCI config JSON as a mapping) under an image name.
  Both return the builder, so calls can be chained.
- `build(stream)` writes to a binary stream: each layer and the config under
  `blobs/sha256/<digest>` (mode 0444), the image manifest blob, `index.json`,
  `oci-layout` (`{"imageLayoutVersion":"1.0.0"}`) and a Docker-style
  `manifest.json` with `Config`, `RepoTags` and `Layers` (mode 0644).

Rules applied by `build`:

- More than one configuration raises `ValueError("only one config is supported")`.
- A configuration without `os` or `architecture` raises `ValueError`; these two
  values become the platform of the manifest's entry in `index.json`.
- The manifest lists only those layers whose `sha256:` digest appears in the
  config's `rootfs.diff_ids`.
- If the image name contains a colon, the part after the first colon is stored
  in the `org.opencontainers.image.ref.name` annotation. The full name always
  goes into `io.containerd.image.name` and into `RepoTags`.

`sha256_file(path)` returns the hex SHA-256 of a file. The media type and
annotation names are exported as module constants.

```python
from wasmbundle.tarbuilder import Builder

config = {
    "architecture": "wasm",
    "os": "wasi",
    "rootfs": {"type": "layers", "diff_ids": ["sha256:..."]},
}
with open("img.tar", "wb") as out:
    Builder().add_layer("layer.tar").add_config(config, "example/app:latest").build(out)
```

### `wasmbundle.demo_image`

`build_image(app_path, out_dir)` puts the module at `app_path` into
`out_dir/layer.tar` as `wasi-demo-app.wasm`, builds an image with `os` `wasi`,
`architecture` `wasm` and entrypoint `/wasi-demo-app.wasm`, named
`IMAGE_NAME`, and writes it to `out_dir/img.tar`, whose path it returns. A
missing module raises `FileNotFoundError`.

### `wasmbundle.messages` and `wasmbundle.responses`

Dataclasses for the sandbox manager service, all with string fields:

- `CreateRequest(namespace, id, ttrpc_address, working_directory)`
- `ConnectRequest(id, ttrpc_address)`
- `DeleteRequest(namespace, id, ttrpc_address)`
- `CreateResponse(socket_path)`, `ConnectResponse(socket_path)`, `DeleteResponse()`

Each `Message` encodes to the protobuf wire format with `to_bytes()` and
decodes with the class method `from_bytes(data)`. Empty strings are not
written; unknown fields are kept in `unknown_fields` and written back.
Malformed input raises `DecodeError` (a `ValueError`). `full_name()` gives the
qualified name, e.g. `runwasi.services.sandbox.v1.CreateRequest`.

### `wasmbundle.service`

`Manager` is the service base class. Its `create`, `connect` and `delete`
methods raise `RpcError` with code `NOT_FOUND` ("... is not supported")
until a subclass overrides them; a request of the wrong type raises
`TypeError`.

`create_manager(service)` returns a dict from method paths such as
`/runwasi.services.sandbox.v1.Manager/Create` to handlers called as
`handler(ctx, payload_bytes)`. A handler decodes the request, calls the
service method and returns the encoded response; a payload that cannot be
decoded raises `RpcError` with code `INVALID_ARGUMENT`.

### `wasmbundle.ociutils`

Helpers over a runtime spec given as a parsed `config.json` mapping:

- `env_to_wasi(spec)`: the process environment as `KEY=VALUE` strings
  (`ValueError` if the spec has no process).
- `env_to_pairs(spec)`: the same split at the first `=`; an entry without
  `=` gives an empty value.
- `get_wasm_mounts(spec)`: destinations of `bind` and `tmpfs` mounts.
- `module_path(root, args)`: `root` joined with the first argument, a leading
  separator removed (`ValueError` if `args` is empty).
- `maybe_open_stdio(path)`: opens the file for reading and writing, unbuffered;
  returns `None` for an empty or non-existent path and raises other errors.

### `wasmbundle.stdio`

- `maybe_open_stdio_fd(path)`: like `maybe_open_stdio`, but returns a raw
  descriptor.
- `redirect_stdio(stdin_path="", stdout_path="", stderr_path="")`: points
  descriptors 0, 1 and 2 at the given files, skipping empty or missing paths,
  and remembers the originals.
- `reset_stdio()`: restores every descriptor that was redirected.

## The demo application

Installing the package provides the `wasi-demo-app` command
(`wasmbundle.demo_app:main`):

```
wasi-demo-app echo hello world          # prints "hello world"
wasi-demo-app sleep 1.5                 # sleeps for 1.5 seconds
wasi-demo-app exit 3                    # exits with status 3
wasi-demo-app write out.txt some text   # writes "some text" to out.txt
wasi-demo-app                           # same as "daemon": prints a song every second, forever
```

After a command finishes it prints `exiting` on standard error. An unknown
command is reported on standard error and the exit status is 1.

## What it does not do

The package does not run WebAssembly modules: it has no WASI runtime, no
container shim and no process or cgroup management. `wasmbundle.service`
only dispatches already-received payloads to a `Manager`; there is no RPC
transport, socket server or client.