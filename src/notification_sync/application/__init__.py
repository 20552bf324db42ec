"""Application layer – side-effect dispatch and the synchronisation coordinator."""
