from bundocs.cli import app

app()
