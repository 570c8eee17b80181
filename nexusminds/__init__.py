"""NexusMinds - multi-agent conversation orchestrator."""

__version__ = "1.0.0"
