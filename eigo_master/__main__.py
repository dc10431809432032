from eigo_master.run import cli

cli()
