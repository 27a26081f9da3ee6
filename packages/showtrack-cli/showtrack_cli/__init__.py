"""Command-line interface for the game show result tracker."""
