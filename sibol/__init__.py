"""Backend do fluxo de manutenção (SIBOL)."""
