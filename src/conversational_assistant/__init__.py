"""Conversational assistant: prefix-routed chat completions with realtime fan-out."""

__version__ = "0.1.0"
