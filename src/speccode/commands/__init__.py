"""Built-in CLI sub-commands for speccode.

* :mod:`~speccode.commands.listing` -- ``list organizations|applications|versions``.
* :mod:`~speccode.commands.code` -- print or sync one generator's output.
* :mod:`~speccode.commands.upload` -- publish a spec file as a new version.
* :mod:`~speccode.commands.update` -- synchronize every target in the
  project file.
* :mod:`~speccode.commands.init` -- create a connection profile.
* :mod:`~speccode.commands.config` -- view and modify global settings.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered on the root app.
"""
