"""Scoring engine, test orchestration, practice and progress services.

Import the service modules directly; the repositories depend on
`satprep.services.scoring`, so this package keeps no eager imports.
"""
