"""Core of the migrator: connection descriptors, backends, errors and the engine."""
