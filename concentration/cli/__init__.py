"""Command-line front ends for the Concentration engine."""
