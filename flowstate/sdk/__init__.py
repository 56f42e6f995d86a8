"""
SDK for FlowState.

Provides the chat assistant collaborator.
"""

from .assistant import WaterAssistant

__all__ = ["WaterAssistant"]
