# noqa: D104 - package initialization
from .logging import configure_structured_logging  # noqa: F401
from .metrics import metrics_blueprint, observe_upstream_call, record_token_refresh  # noqa: F401
