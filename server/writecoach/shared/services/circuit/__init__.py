from .circuit_breaker import CircuitBreaker, CircuitEvent, CircuitState, state_for, transition

__all__ = ["CircuitBreaker", "CircuitEvent", "CircuitState", "state_for", "transition"]
