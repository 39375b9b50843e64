from coverlay.cli.entry import CoverlayOptions, cli, main

__all__ = ["CoverlayOptions", "cli", "main"]
