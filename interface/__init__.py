"""
Interface package: the GTP side of the bridge.

Modules:
    gtp        — GTP command and response framing
    controller — Engine subprocess with stdout frame and stderr line readers
    capture    — Diagnostic log capture and stderr relay
    config     — Feature switches and #sabaki payload models (pydantic)
    session    — Session state and the command dispatcher
    cli        — Command-line entry point: python -m interface.cli
"""
