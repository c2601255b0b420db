"""HTTP surface of the session gateway (Flask blueprints, decorators, error handlers)."""
