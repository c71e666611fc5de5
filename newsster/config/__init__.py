"""Configuration for the Newsster feed."""
