"""Operator command-line tools for toolbench.

- ``python -m toolbench.cli analytics`` prints the usage report.
- ``python -m toolbench.cli feedback list`` lists feedback board items.
- ``python -m toolbench.cli feedback set-status`` triages an item.

The CLI reads the same ``.env`` settings as the server and talks to the
same blob store, so it works against a running deployment's data.
"""
