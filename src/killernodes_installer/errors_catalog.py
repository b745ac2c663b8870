"""Actionable error catalog for the KILLER NODES installer."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "unsupported_os": {
        "what": "Only Ubuntu is supported. Current OS: {name}",
        "next": "Run the installer on a fresh Ubuntu 22.04 or 24.04 LTS server.",
    },
    "os_release_missing": {
        "what": "Cannot determine OS version: {path} not found.",
        "next": "Run the installer on a fresh Ubuntu 22.04 or 24.04 LTS server.",
    },
    "insufficient_memory": {
        "what": "Minimum {minimum}GB RAM required. Current: {current}GB",
        "next": "Resize the server to at least {minimum}GB of memory and retry.",
    },
    "missing_template": {
        "what": "Environment template not found: {path}",
        "next": "Check that the repository clone is complete and ships `.env.example`.",
    },
    "clone_failed": {
        "what": "Could not clone {url} into {path}.",
        "next": "Check network access to the repository and retry.",
    },
    "services_not_ready": {
        "what": "Services did not become ready after {attempts} checks: {pending}",
        "next": "Inspect `docker compose logs` in {path} and retry.",
    },
    "certificate_failed": {
        "what": "Certificate request for {domain} failed.",
        "next": "Check that DNS for {domain} points to this server and port 80 is reachable.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
