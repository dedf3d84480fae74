"""Progress snapshot shared with the glance/widget surface."""
