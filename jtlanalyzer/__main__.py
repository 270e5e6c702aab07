# Copyright (c) Meta Platforms, Inc. and affiliates.

"""
Allow running jtlanalyzer as a module: python -m jtlanalyzer
"""

from jtlanalyzer.cli import main

if __name__ == "__main__":
    main()
