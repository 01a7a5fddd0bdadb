"""OCI image tarballs for WASI modules, sandbox manager messages and dispatch, runtime-spec and stdio helpers."""

__version__ = "0.1.0"