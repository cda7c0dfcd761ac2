"""Command line interface (``rave``)."""
