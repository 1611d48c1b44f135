"""Qt widgets for DSVEdit."""
