from conversational_assistant.routing.router import (
    DEFAULT_MODEL,
    DEFAULT_ROUTING_RULES,
    PrefixRouter,
    RouteDecision,
    RoutingRule,
    RoutingTableEntry,
)

__all__ = [
    "DEFAULT_MODEL",
    "DEFAULT_ROUTING_RULES",
    "PrefixRouter",
    "RouteDecision",
    "RoutingRule",
    "RoutingTableEntry",
]
