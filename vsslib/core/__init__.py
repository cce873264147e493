"""Protocol layers built on the group abstraction."""
