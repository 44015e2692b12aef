"""
The VIEW layer turns published snapshots into drawable PyVista datasets.
It only reads snapshots and never mutates the live tree.
"""
