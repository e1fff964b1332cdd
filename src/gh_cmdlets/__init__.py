"""gh-cmdlets: command set for the GitHub REST and GraphQL APIs."""

__version__ = "0.1.0"
