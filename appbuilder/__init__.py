"""
appbuilder package

This package implements the `appbuilder` configuration CLI for a Docker-based
AppBuilder install.

Key responsibilities are split across modules:
- `options.py`: fold command-line flags and YAML option files into one options bag
- `prompts.py`: ask the operator for whatever the options bag is still missing
- `renderer.py`: render compose templates, copy template assets, patch scripts
- `local_config.py`: read/write `config/local.yml` and `.env` in the install root
- `setup.py`, `ssl_config.py`, `db_config.py`, `bot_manager.py`,
  `notification_email.py`: the individual commands
- `slack_client.py`: isolated Slack Web API interaction (bot token check)
- `pages.py`: mobile client page initialization
- `cli.py`: CLI entrypoint and command dispatch
"""

from __future__ import annotations

__all__ = ["AppBuilderError", "__version__"]

__version__ = "0.1.0"


class AppBuilderError(RuntimeError):
    """Base class for every error the commands surface to the caller."""
