"""Tool-calling document agent."""

from docchat.services.agent.document_agent import DocumentAgent
from docchat.services.agent.tools import DocumentTools, ToolExecution

__all__ = ["DocumentAgent", "DocumentTools", "ToolExecution"]
