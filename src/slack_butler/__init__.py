"""slack-butler - Slack channel lifecycle automation."""

__version__ = "0.1.0"
