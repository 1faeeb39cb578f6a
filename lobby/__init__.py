"""Daily lobby: storage, configuration, presenter and level hand-off."""
