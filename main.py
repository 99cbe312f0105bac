#!/usr/bin/env python3

from src.rollup_probe.cli import run

if __name__ == "__main__":
    run()
