"""Entry point for `python -m contract_lens`"""

from contract_lens.cli.main import app

app()
