"""
Prometheus Metrics Registration.

Custom metrics for the agent orchestration pipeline.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# COUNTERS
# ============================================================================

tool_executions_total = Counter(
    "tool_executions_total",
    "Total tool executions",
    ["tool_name", "tier", "status"],  # success, failure, error
)

tool_verifications_total = Counter(
    "tool_verifications_total",
    "Tool result verifications",
    ["tool_name", "verified"],
)

agent_turns_total = Counter(
    "agent_turns_total",
    "Agent turns by outcome",
    ["outcome"],  # answered, pending_confirmation, planning_error, budget_exceeded, executed_*
)

confirmations_total = Counter(
    "confirmations_total",
    "Confirmation lifecycle events",
    ["event"],  # created, approved, declined, not_found, expired, already_resolved
)

json_parse_total = Counter(
    "json_parse_total",
    "JSON repair parser outcomes by winning strategy",
    ["strategy"],  # direct, code_block, balanced, repair, aggressive, failed
)

# ============================================================================
# HISTOGRAMS
# ============================================================================

tool_execution_duration = Histogram(
    "tool_execution_duration_seconds",
    "Tool execution duration",
    ["tool_name"],
    buckets=(0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

agent_loop_duration = Histogram(
    "agent_loop_duration_seconds",
    "Complete agent turn duration",
    buckets=(1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0),
)

agent_loop_iterations = Histogram(
    "agent_loop_iterations",
    "Provider round trips per agent turn",
    buckets=(1, 2, 3, 4, 5, 6, 8, 10),
)
