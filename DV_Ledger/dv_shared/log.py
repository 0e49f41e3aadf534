import sys

import structlog

_CONFIGURED = False


def _human_renderer(_, __, event_dict):
    """Render structlog event dictionaries into timestamped key=value lines."""
    ts = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", "").upper()
    event = event_dict.pop("event", "")
    extras = " ".join(f"{k}={event_dict[k]}" for k in sorted(event_dict))
    return f"{ts} [{level}] {event} {extras}".strip()


def _drop_payloads(_, __, event_dict):
    # Ciphertext and proofs never reach the log stream
    event_dict.pop("encrypted_blob", None)
    event_dict.pop("proof_signature", None)
    return event_dict


def configure_logging(debug: bool = False, stream=None) -> None:
    """Install the ledger's structlog pipeline; INFO and above unless debug."""
    global _CONFIGURED
    structlog.configure(
        processors=[
            _drop_payloads,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.dict_tracebacks,
            _human_renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(10 if debug else 20),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=False,
    )
    _CONFIGURED = True


def get_logger(component: str):
    """Return a structlog logger bound to a ledger component name."""
    if not _CONFIGURED:
        configure_logging()
    return structlog.get_logger(component=component)
