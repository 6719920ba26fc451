"""DocGuard: client-side abuse mitigation and security telemetry.

Bounded contexts:
    - rate_limiter: sliding-window limiters and the violation lockout
    - telemetry: event model, classifier and batched delivery pipeline
    - guard: session-scoped composition of the above around user actions
    - integrity: digest verification of the curated document list
    - collector: reference HTTP collector for telemetry batches
"""

__version__ = "0.1.0"
