"""Command line front end for marquee."""
