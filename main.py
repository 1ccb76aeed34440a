"""Interactive CLI entry point for the cognitive agent."""

from __future__ import annotations

from cognitiveAgent.cli import main


if __name__ == "__main__":
    main()
