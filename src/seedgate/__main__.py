from seedgate.cli.app import app

app()
