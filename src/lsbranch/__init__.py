"""List the checked out branches of your git clones."""
