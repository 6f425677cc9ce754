"""Core models shared by the sampler and the CLI."""
