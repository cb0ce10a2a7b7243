"""Test package for the Path Trace game.

The core tests exercise mask classification, segment sampling and attempt
scoring without touching pygame. The smoke tests drive the pygame shell
headlessly using SDL's dummy video driver. Run ``pytest`` from the project
root.
"""
