"""speccode -- keep code generated by a remote API specification service in sync.

The remote service hosts API specifications (organizations -> applications ->
versions) and runs code generators over them. speccode browses that
catalogue, uploads new spec versions, and -- its main job -- keeps the
generated files checked into a working tree up to date.

Typical workflow::

    speccode init --token-source env:SPECCODE_TOKEN   # create a profile
    speccode list applications acme                   # browse
    speccode update                                   # sync .speccode.yaml targets

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and profile management.
    project: Project file loading.
    sync: Decides which generated files are out of date.
    apply: Writes staged updates to disk.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting with Rich.
"""

__version__ = "0.3.0"
