"""Reply orchestration core."""

from nudge.agent.orchestrator import CredentialHealth, Orchestrator
from nudge.agent.responder import RuleResponder

__all__ = ["CredentialHealth", "Orchestrator", "RuleResponder"]
