"""wsgate command line interface."""
