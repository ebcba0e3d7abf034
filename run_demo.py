"""Demo script: run every scenario and show the per-tick burn predictions."""
from burntime.cli import main

main(["--scenario", "all", "--ticks", "6", "--dt", "5"])
