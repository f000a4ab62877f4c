"""
Tree Sync — Clone or fast-forward the repositories of a device tree.

This package provides the manifest, run configuration, git wrappers,
and the synchronizer that ties them together.
"""
