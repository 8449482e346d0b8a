from __future__ import annotations


def render_usage() -> str:
    return """
    GET  /status        - Status of all tasks in the queue
    GET  /status/<id>   - Status and log output of one task
    POST /enqueue       - Enqueue a verification job
                          form fields: repo, commit (default HEAD), optimizer,
                          code_id, chain_id, lcd
    GET  /health        - Liveness probe
"""
