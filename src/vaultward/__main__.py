from vaultward.cli import cli

cli()
