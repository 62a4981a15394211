from safecmd.cli import cli

cli(prog_name="safe-command")
