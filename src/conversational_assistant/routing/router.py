"""
Prefix-based model router.

'PrefixRouter' inspects the start of a raw user message and picks the target
model and system prompt from a static rule table. Rules are checked in their
configured order and the first rule whose prefix the lower-cased message starts
with wins; there is no scoring and no LLM call. Messages that match nothing go
to the default model with no system prompt and are passed through untouched.

The router is pure: no I/O and no failure cases.
"""

from collections.abc import Sequence

from pydantic import BaseModel, field_validator

DEFAULT_MODEL = "gpt-4o"


class RoutingRule(BaseModel):
    """
    A static mapping from a message prefix to a model and optional system prompt.

    'prefix' is stored lower-cased since matching is case-insensitive. 'model'
    left as None resolves to the router's default model.
    """

    prefix: str
    model: str | None = None
    system_prompt: str | None = None

    @field_validator("prefix")
    @classmethod
    def _lower_prefix(cls, value: str) -> str:
        if not value:
            raise ValueError("Routing prefix must not be empty")
        return value.lower()


class RouteDecision(BaseModel):
    model: str
    system_prompt: str | None
    cleaned_message: str


class RoutingTableEntry(BaseModel):
    """Client-facing view of a routing rule, used for prefix previews."""

    prefix: str
    model: str
    description: str


DEFAULT_ROUTING_RULES: tuple[RoutingRule, ...] = (
    RoutingRule(
        prefix="code:",
        system_prompt=(
            "You are an expert software developer and architect. Provide detailed, accurate code examples and "
            "explanations. Focus on best practices, security, and maintainability."
        ),
    ),
    RoutingRule(
        prefix="research:",
        system_prompt=(
            "You are a research assistant. Provide well-researched, accurate information with proper context and "
            "citations when possible. Be thorough and analytical."
        ),
    ),
    RoutingRule(
        prefix="creative:",
        system_prompt=(
            "You are a creative writing assistant. Help with storytelling, creative projects, brainstorming, and "
            "artistic endeavors. Be imaginative and inspiring."
        ),
    ),
    RoutingRule(
        prefix="analysis:",
        system_prompt=(
            "You are a data analyst and strategic thinker. Provide detailed analysis, break down complex problems, "
            "and offer insights based on available information."
        ),
    ),
)

_DESCRIPTION_LENGTH = 100


class PrefixRouter:
    """
    Routes raw messages to a model by literal, case-insensitive prefix match.

    Attributes:
        rules: The rule table, in match order.
        default_model: Model used when no rule matches, and for rules without
            an explicit model.
    """

    def __init__(self, rules: Sequence[RoutingRule] = DEFAULT_ROUTING_RULES, default_model: str = DEFAULT_MODEL):
        self.rules = tuple(rules)
        self.default_model = default_model

    def route(self, raw_message: str) -> RouteDecision:
        lowered = raw_message.lower()
        for rule in self.rules:
            if lowered.startswith(rule.prefix):
                return RouteDecision(
                    model=rule.model or self.default_model,
                    system_prompt=rule.system_prompt,
                    cleaned_message=raw_message[len(rule.prefix) :].strip(),
                )
        return RouteDecision(model=self.default_model, system_prompt=None, cleaned_message=raw_message)

    def routing_table(self) -> list[RoutingTableEntry]:
        return [
            RoutingTableEntry(
                prefix=rule.prefix,
                model=rule.model or self.default_model,
                description=f"{rule.system_prompt[:_DESCRIPTION_LENGTH]}..." if rule.system_prompt else "",
            )
            for rule in self.rules
        ]
